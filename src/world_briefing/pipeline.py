"""Ingestion-to-briefing pipeline.

Sources -> concurrent fetch -> newest-first sort -> clustering -> cache, and on
demand keywords -> themes -> briefing text. All state a run needs travels in a
`BriefingContext`; nothing here is module-global.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .briefing import build_summary
from .cache import RegionCache
from .clustering import deduplicate
from .config import Settings, get_settings
from .fetcher import FeedFetcher, fetch_region
from .filters import filter_by_country
from .models import Article, RawArticle, Source
from .sources import get_sources, normalize_region, region_label
from .streaming import SummaryStreamer

logger = logging.getLogger(__name__)


@dataclass
class BriefingContext:
    """Cache, fetcher and streamer shared by the calls of one owner."""

    cache: RegionCache
    fetcher: FeedFetcher
    streamer: SummaryStreamer = field(default_factory=SummaryStreamer)
    settings: Optional[Settings] = None

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "BriefingContext":
        settings = settings or get_settings()
        return cls(
            cache=RegionCache(ttl=settings.cache_ttl_seconds),
            fetcher=FeedFetcher(
                timeout=settings.fetch_timeout_seconds,
                user_agent=settings.user_agent,
                max_items=settings.max_items_per_feed,
            ),
            streamer=SummaryStreamer(
                batch_size=settings.stream_batch_size,
                interval=settings.stream_interval_seconds,
            ),
            settings=settings,
        )


def newest_first(articles: Sequence[RawArticle]) -> list:
    return sorted(articles, key=lambda a: a.published_at, reverse=True)


def load_region_articles(sources: Sequence[Source], fetcher: FeedFetcher) -> List[Article]:
    """Fetch every source and return deduplicated articles, newest first."""
    raw = fetch_region(sources, fetcher)
    articles = newest_first(deduplicate(newest_first(raw)))
    logger.info(
        "Merged %d raw items from %d sources into %d articles",
        len(raw),
        len(sources),
        len(articles),
    )
    return articles


def get_region_articles(region: str, context: BriefingContext) -> List[Article]:
    """Cache-aware article list for a region; raises UnknownRegionError."""
    sources = get_sources(region)
    key = normalize_region(region)
    return context.cache.get_or_load(key, lambda: load_region_articles(sources, context.fetcher))


def refresh_region(region: str, context: BriefingContext) -> List[Article]:
    """Drop the region's entry and recompute it."""
    get_sources(region)
    context.cache.invalidate(normalize_region(region))
    return get_region_articles(region, context)


def build_briefing(articles: Sequence[Article], label: str) -> str:
    return build_summary(articles, label)


def summarize_region(
    region: str, context: BriefingContext, country: Optional[str] = None
) -> str:
    """Briefing text for a region, optionally narrowed to one country."""
    articles = filter_by_country(get_region_articles(region, context), country)
    label = country or region_label(region)
    return build_briefing(articles, label)
