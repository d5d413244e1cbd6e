"""Static registry of news feeds per region."""

from __future__ import annotations

from typing import Dict, List, Tuple

from .models import RegionInfo, Source


class UnknownRegionError(ValueError):
    """Raised when a region id is not in the registry."""


def _bbc(name: str, path: str) -> Source:
    return Source(name=name, url=f"https://feeds.bbci.co.uk/news/{path}/rss.xml", logo="BBC")


def _reuters(name: str, region: str) -> Source:
    return Source(
        name=name,
        url=(
            "https://www.reutersagency.com/feed/?taxonomy=best-regions"
            f"&post_type=best&best-regions={region}"
        ),
        logo="R",
    )


_AL_JAZEERA_URL = "https://www.aljazeera.com/xml/rss/all.xml"
_DW_WORLD_URL = "https://rss.dw.com/xml/rss-en-world"

# Ordered: the first source's items come first in the merged list.
FEEDS: Dict[str, Tuple[Source, ...]] = {
    "africa": (
        _bbc("BBC Africa", "world/africa"),
        Source(name="Al Jazeera Africa", url=_AL_JAZEERA_URL, logo="AJ"),
        _reuters("Reuters Africa", "africa"),
    ),
    "asia": (
        _bbc("BBC Asia", "world/asia"),
        Source(name="Al Jazeera Asia", url=_AL_JAZEERA_URL, logo="AJ"),
        _reuters("Reuters Asia", "asia"),
    ),
    "europe": (
        _bbc("BBC Europe", "world/europe"),
        _reuters("Reuters Europe", "europe"),
        Source(name="DW News", url=_DW_WORLD_URL, logo="DW"),
    ),
    "north_america": (
        _bbc("BBC North America", "world/us_and_canada"),
        Source(name="NPR News", url="https://feeds.npr.org/1001/rss.xml", logo="NPR"),
        Source(
            name="AP News",
            url="https://rsshub.app/apnews/topics/apf-topnews",
            logo="AP",
        ),
    ),
    "south_america": (
        _bbc("BBC Latin America", "world/latin_america"),
        Source(name="Al Jazeera", url=_AL_JAZEERA_URL, logo="AJ"),
        Source(name="DW News", url=_DW_WORLD_URL, logo="DW"),
    ),
    "oceania": (
        _bbc("BBC Asia-Pacific", "world/asia"),
        Source(
            name="ABC Australia",
            url="https://www.abc.net.au/news/feed/2942460/rss.xml",
            logo="ABC",
        ),
        Source(name="Al Jazeera", url=_AL_JAZEERA_URL, logo="AJ"),
    ),
    "antarctica": (
        _bbc("BBC Science", "science_and_environment"),
        Source(name="DW Science", url="https://rss.dw.com/xml/rss-en-science", logo="DW"),
    ),
}


def normalize_region(region: str) -> str:
    return region.strip().lower()


def is_known_region(region: str) -> bool:
    return normalize_region(region) in FEEDS


def get_sources(region: str) -> Tuple[Source, ...]:
    """Return the ordered sources for a region; raise on unknown ids."""
    key = normalize_region(region)
    try:
        return FEEDS[key]
    except KeyError:
        raise UnknownRegionError(f"Invalid continent: {region!r}") from None


def region_label(region: str) -> str:
    """Display name for a region id, e.g. 'north_america' -> 'North America'."""
    return " ".join(part.capitalize() for part in normalize_region(region).split("_"))


def list_regions() -> List[RegionInfo]:
    return [
        RegionInfo(
            id=key,
            name=region_label(key),
            source_count=len(sources),
            sources=[s.name for s in sources],
        )
        for key, sources in FEEDS.items()
    ]
