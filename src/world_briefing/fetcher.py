"""Fetch and parse RSS/Atom feeds into raw article records.

One HTTP attempt per source; every failure is contained here and turns into an
empty contribution plus a warning in the log.
"""

from __future__ import annotations

import html
import logging
import re
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone
from typing import Any, List, Optional, Sequence

import feedparser
import requests
from dateutil.parser import parse as parse_date

from .models import RawArticle, Source

logger = logging.getLogger(__name__)

SNIPPET_LENGTH = 200

TAG_PATTERN = re.compile(r"<[^>]*>")
IMG_SRC_PATTERN = re.compile(r"<img[^>]+src=[\"']([^\"']+)[\"']", re.IGNORECASE)
VIDEO_URL_PATTERN = re.compile(
    r"\.(?:mp4|webm|mov|m4v|m3u8|mpd)(?:$|[?#])", re.IGNORECASE
)

TZINFOS = {
    "EST": timezone(timedelta(hours=-5)),
    "EDT": timezone(timedelta(hours=-4)),
    "CST": timezone(timedelta(hours=-6)),
    "CDT": timezone(timedelta(hours=-5)),
    "MST": timezone(timedelta(hours=-7)),
    "MDT": timezone(timedelta(hours=-6)),
    "PST": timezone(timedelta(hours=-8)),
    "PDT": timezone(timedelta(hours=-7)),
    "GMT": timezone.utc,
    "UTC": timezone.utc,
    "BST": timezone(timedelta(hours=1)),
}


def strip_markup(raw: str) -> str:
    text = html.unescape(TAG_PATTERN.sub("", raw or ""))
    return " ".join(text.split())


def _raw_description(entry: Any) -> str:
    description = entry.get("summary") or entry.get("description")
    if description:
        return description
    for content in entry.get("content") or []:
        value = content.get("value")
        if value:
            return value
    return ""


def _parse_published(entry: Any, now: datetime) -> datetime:
    published = entry.get("published") or entry.get("updated")
    if not published:
        return now
    try:
        dt = parse_date(published, tzinfos=TZINFOS)
    except (ValueError, OverflowError):
        logger.debug("Unparseable date %r; using fetch time", published)
        return now
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _is_typed(media: Any, kind: str) -> bool:
    mime = (media.get("type") or "").lower()
    return media.get("medium") == kind or mime.startswith(f"{kind}/")


def _media_url(media: Any) -> Optional[str]:
    return media.get("url") or media.get("href")


def extract_image(entry: Any, raw_description: str) -> Optional[str]:
    """First image in order: enclosure, media:content, media:thumbnail, inline <img>."""
    for enclosure in entry.get("enclosures") or []:
        if _is_typed(enclosure, "image") and _media_url(enclosure):
            return _media_url(enclosure)
    for media in entry.get("media_content") or []:
        if _is_typed(media, "image") and _media_url(media):
            return _media_url(media)
    for thumb in entry.get("media_thumbnail") or []:
        if _media_url(thumb):
            return _media_url(thumb)
    match = IMG_SRC_PATTERN.search(raw_description or "")
    if match:
        return match.group(1)
    return None


def extract_video(entry: Any, link: str) -> Optional[str]:
    candidates = list(entry.get("enclosures") or []) + list(entry.get("media_content") or [])
    for media in candidates:
        url = _media_url(media)
        if not url:
            continue
        if _is_typed(media, "video") or VIDEO_URL_PATTERN.search(url):
            return url
    if "/video/" in link:
        return link
    return None


def parse_entry(entry: Any, source: Source, now: datetime) -> RawArticle:
    """Map one feed entry to a RawArticle using the documented fallbacks."""
    title = (entry.get("title") or "").strip() or "No title"
    link = (entry.get("link") or "").strip() or "#"
    raw_description = _raw_description(entry)
    video = extract_video(entry, link)
    return RawArticle(
        title=title,
        link=link,
        published_at=_parse_published(entry, now),
        snippet=strip_markup(raw_description)[:SNIPPET_LENGTH],
        source_name=source.name,
        source_logo=source.logo,
        image=extract_image(entry, raw_description),
        video=video,
        media_kind="video" if video else "article",
    )


class FeedFetcher:
    """Fetch a single source; never raises for network or parse failures."""

    def __init__(
        self,
        *,
        timeout: float = 10.0,
        user_agent: str = "WorldNews/1.0",
        max_items: int = 10,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self.max_items = max_items
        self.session = session or requests.Session()

    def fetch(self, source: Source) -> List[RawArticle]:
        try:
            response = self.session.get(
                source.url,
                timeout=self.timeout,
                headers={"User-Agent": self.user_agent},
            )
            response.raise_for_status()
            feed = feedparser.parse(response.content)
            if feed.bozo and not feed.entries:
                raise ValueError(f"unparseable feed: {feed.get('bozo_exception')}")
        except Exception as exc:  # network, HTTP status, or parse errors
            logger.warning("Failed to fetch %s: %s", source.name, exc)
            return []

        now = datetime.now(timezone.utc)
        articles: List[RawArticle] = []
        for entry in feed.entries[: self.max_items]:
            try:
                articles.append(parse_entry(entry, source, now))
            except Exception as exc:
                logger.debug("Skipping entry from %s: %s", source.name, exc)
        logger.info("Fetched %d items from %s", len(articles), source.name)
        return articles


def fetch_region(sources: Sequence[Source], fetcher: FeedFetcher) -> List[RawArticle]:
    """Fetch all sources concurrently; results keep registry order."""
    if not sources:
        return []
    with ThreadPoolExecutor(max_workers=len(sources)) as executor:
        futures = [executor.submit(fetcher.fetch, source) for source in sources]
    articles: List[RawArticle] = []
    for source, future in zip(sources, futures):
        try:
            articles.extend(future.result())
        except Exception as exc:
            logger.warning("Failed to fetch %s: %s", source.name, exc)
    return articles
