"""Extractive briefing builder and its small markdown-like text format.

The format:

    ## Today's Briefing: <label>
    <blank>
    **<theme label>**
    - <title> — <snippet> *(<source>)*
    <blank>
    **Key Topics:** <kw>, <kw>
    <blank>
    *Based on <n> articles from <source>, <source>.*

Bold uses ``**``, the heading ``##`` and bullets ``-``. Converting it to HTML
or anything else is left to the caller. ``parse_briefing`` reads the format
back; the title/snippet split happens at the first `` — ``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Sequence

from .keywords import extract_keywords
from .models import Article
from .themes import group_by_theme

NO_ARTICLES_MESSAGE = "No articles available to summarize for this region."
HEADING_PREFIX = "## Today's Briefing: "
KEY_TOPICS_PREFIX = "**Key Topics:** "
SNIPPET_SEPARATOR = " — "
BULLET_SNIPPET_LENGTH = 120
MAX_KEY_TOPICS = 6

_SECTION_RE = re.compile(r"^\*\*(?P<label>.+)\*\*$")
_BULLET_RE = re.compile(r"^- (?P<body>.*) \*\((?P<source>.*)\)\*$")
_ATTRIBUTION_RE = re.compile(r"^\*Based on (?P<count>\d+) articles from (?P<sources>.*)\.\*$")


@dataclass
class BriefingItem:
    title: str
    snippet: str
    source: str


@dataclass
class BriefingSection:
    label: str
    items: List[BriefingItem] = field(default_factory=list)


@dataclass
class Briefing:
    label: str
    sections: List[BriefingSection] = field(default_factory=list)
    key_topics: List[str] = field(default_factory=list)
    article_count: int = 0
    sources: List[str] = field(default_factory=list)


def _unique(values: Sequence[str]) -> List[str]:
    return list(dict.fromkeys(values))


def compose_briefing(articles: Sequence[Article], region_label: str) -> Briefing:
    """Run keyword extraction and theme grouping into a Briefing document."""
    keywords = extract_keywords(articles)
    themes = group_by_theme(articles, keywords)
    sections = [
        BriefingSection(
            label=theme.label,
            items=[
                BriefingItem(
                    title=a.title,
                    snippet=a.snippet[:BULLET_SNIPPET_LENGTH],
                    source=a.source_name,
                )
                for a in theme.articles
            ],
        )
        for theme in themes
    ]
    return Briefing(
        label=region_label,
        sections=sections,
        key_topics=[k.term for k in keywords[:MAX_KEY_TOPICS]],
        article_count=len(articles),
        sources=_unique([a.source_name for a in articles]),
    )


def render_briefing(briefing: Briefing) -> str:
    lines = [f"{HEADING_PREFIX}{briefing.label}\n\n"]
    for section in briefing.sections:
        lines.append(f"**{section.label}**\n")
        for item in section.items:
            snippet = f"{SNIPPET_SEPARATOR}{item.snippet}" if item.snippet else ""
            lines.append(f"- {item.title}{snippet} *({item.source})*\n")
        lines.append("\n")
    lines.append(f"{KEY_TOPICS_PREFIX}{', '.join(briefing.key_topics)}\n\n")
    lines.append(
        f"*Based on {briefing.article_count} articles from {', '.join(briefing.sources)}.*"
    )
    return "".join(lines)


def build_summary(articles: Sequence[Article], region_label: str) -> str:
    """Render the briefing text for a region, or the fixed empty-state message."""
    if not articles:
        return NO_ARTICLES_MESSAGE
    return render_briefing(compose_briefing(articles, region_label))


def _split_list(text: str) -> List[str]:
    return [part for part in text.split(", ") if part] if text else []


def parse_briefing(text: str) -> Briefing:
    """Read a rendered briefing back into its document structure."""
    lines = text.split("\n")
    if not lines or not lines[0].startswith(HEADING_PREFIX):
        raise ValueError("briefing must start with a heading line")

    briefing = Briefing(label=lines[0][len(HEADING_PREFIX):])
    current: BriefingSection | None = None

    for line in lines[1:]:
        if not line:
            current = None
            continue
        if line.startswith(KEY_TOPICS_PREFIX.rstrip()):
            briefing.key_topics = _split_list(line[len(KEY_TOPICS_PREFIX):].strip())
            continue
        attribution = _ATTRIBUTION_RE.match(line)
        if attribution:
            briefing.article_count = int(attribution.group("count"))
            briefing.sources = _split_list(attribution.group("sources"))
            continue
        section = _SECTION_RE.match(line)
        if section:
            current = BriefingSection(label=section.group("label"))
            briefing.sections.append(current)
            continue
        bullet = _BULLET_RE.match(line)
        if bullet and current is not None:
            title, _, snippet = bullet.group("body").partition(SNIPPET_SEPARATOR)
            current.items.append(
                BriefingItem(title=title, snippet=snippet, source=bullet.group("source"))
            )
            continue
        raise ValueError(f"unrecognized briefing line: {line!r}")

    return briefing
