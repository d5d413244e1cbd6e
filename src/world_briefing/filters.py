"""Country, search and trending helpers over a region's article list."""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Sequence, Tuple, Union

from .keywords import article_text
from .models import Article

# Country names whose articles are matched by more than the lower-cased name.
# Shared by the news listing and the summary stream.
COUNTRY_ALIASES: Dict[str, Tuple[str, ...]] = {
    "United States": ("united states", "us", "usa", "america"),
    "UK": ("uk", "britain", "england", "scotland"),
    "UAE": ("uae", "united arab emirates"),
    "Czech Republic": ("czech republic", "czech"),
}

CountryEntry = Union[str, Tuple[str, ...]]

COUNTRIES_BY_REGION: Dict[str, Tuple[CountryEntry, ...]] = {
    "africa": (
        "Nigeria", "South Africa", "Kenya", "Egypt", "Ethiopia", "Ghana", "Tanzania",
        "Uganda", "Morocco", "Algeria", "Sudan", "Libya", "Tunisia", "Senegal",
        "Cameroon", "Congo", "Somalia", "Zimbabwe", "Mozambique", "Angola", "Mali",
        "Niger", "Rwanda", "Ivory Coast", "Madagascar",
    ),
    "asia": (
        "China", "India", "Japan", "South Korea", "North Korea", "Indonesia",
        "Pakistan", "Bangladesh", "Philippines", "Vietnam", "Thailand", "Myanmar",
        "Malaysia", "Taiwan", "Iran", "Iraq", "Syria", "Saudi Arabia", "Israel",
        "Palestine", "Turkey", "Afghanistan", "Yemen", "Lebanon", "Jordan",
        ("UAE", "United Arab Emirates"), "Qatar", "Kuwait", "Oman", "Nepal",
        "Sri Lanka", "Cambodia", "Laos", "Mongolia", "Uzbekistan", "Kazakhstan",
        "Singapore", "Hong Kong",
    ),
    "europe": (
        "Ukraine", "Russia", "France", "Germany", ("UK", "Britain", "England", "Scotland"),
        "Spain", "Italy", "Poland", "Netherlands", "Belgium", "Sweden", "Norway",
        "Denmark", "Finland", "Greece", "Portugal", "Ireland", "Austria", "Switzerland",
        ("Czech Republic", "Czech"), "Romania", "Hungary", "Serbia", "Croatia",
        "Bulgaria", "Slovakia", "Lithuania", "Latvia", "Estonia", "Moldova", "Belarus",
        "Georgia", "Albania", "Kosovo", "Bosnia", "Montenegro", "Iceland", "Luxembourg",
        "Malta", "Cyprus",
    ),
    "north_america": (
        ("United States", "US", "USA", "America"), "Canada", "Mexico", "Cuba", "Haiti",
        "Jamaica", "Dominican Republic", "Guatemala", "Honduras", "El Salvador",
        "Nicaragua", "Costa Rica", "Panama", "Puerto Rico", "Trinidad", "Bahamas",
        "Barbados",
    ),
    "south_america": (
        "Brazil", "Argentina", "Colombia", "Chile", "Peru", "Venezuela", "Ecuador",
        "Bolivia", "Paraguay", "Uruguay", "Guyana", "Suriname",
    ),
    "oceania": (
        "Australia", "New Zealand", "Fiji", "Papua New Guinea", "Samoa", "Tonga",
        "Solomon Islands", "Vanuatu",
    ),
    "antarctica": ("Antarctica",),
}

TRENDING_WORD_PATTERN = re.compile(r"[a-z]{4,}")
TRENDING_STOP_WORDS = frozenset(
    """
    the that this with from have been were will would could should
    what when where which their there they them than then into over
    after before about also more some other just says said under
    people first last year years time news world back make many most
    """.split()
)
MAX_TRENDING_TOPICS = 6
MIN_TRENDING_ARTICLES = 3
BREAKING_WINDOW = timedelta(hours=1)


def aliases_for(country: str) -> Tuple[str, ...]:
    return COUNTRY_ALIASES.get(country, (country.lower(),))


def mentions_country(article: Article, country: str) -> bool:
    text = article_text(article)
    return any(alias in text for alias in aliases_for(country))


def filter_by_country(articles: Sequence[Article], country: Optional[str]) -> List[Article]:
    if not country:
        return list(articles)
    return [a for a in articles if mentions_country(a, country)]


def detect_countries(articles: Sequence[Article], region: str) -> List[Tuple[str, int]]:
    """Count articles mentioning each of the region's countries, most first."""
    entries = [
        entry if isinstance(entry, tuple) else (entry,)
        for entry in COUNTRIES_BY_REGION.get(region, ())
    ]
    texts = [article_text(a) for a in articles]
    counts: List[Tuple[str, int]] = []
    for aliases in entries:
        lowered = [alias.lower() for alias in aliases]
        count = sum(1 for text in texts if any(alias in text for alias in lowered))
        if count:
            counts.append((aliases[0], count))
    return sorted(counts, key=lambda item: item[1], reverse=True)


def search_articles(articles: Sequence[Article], query: Optional[str]) -> List[Article]:
    needle = (query or "").strip().lower()
    if not needle:
        return list(articles)
    return [
        a for a in articles if needle in f"{a.title} {a.snippet} {a.source_name}".lower()
    ]


def trending_topics(articles: Sequence[Article], limit: int = MAX_TRENDING_TOPICS) -> List[str]:
    """Capitalized title words shared by at least two articles."""
    if len(articles) < MIN_TRENDING_ARTICLES:
        return []
    freq: Dict[str, int] = {}
    for article in articles:
        seen = set()
        for word in TRENDING_WORD_PATTERN.findall(article.title.lower()):
            if word in TRENDING_STOP_WORDS or word in seen:
                continue
            seen.add(word)
            freq[word] = freq.get(word, 0) + 1
    ranked = sorted(
        (item for item in freq.items() if item[1] >= 2),
        key=lambda item: item[1],
        reverse=True,
    )
    return [word.capitalize() for word, _ in ranked[:limit]]


def is_breaking(article: Article, now: Optional[datetime] = None) -> bool:
    now = now or datetime.now(timezone.utc)
    return article.published_at > now - BREAKING_WINDOW
