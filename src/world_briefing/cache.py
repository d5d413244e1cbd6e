"""Time-boxed, per-region memo of merged article lists."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Union

from .locks import KeyedLocks
from .models import Article

logger = logging.getLogger(__name__)


class _Miss:
    def __repr__(self) -> str:
        return "MISS"

    def __bool__(self) -> bool:
        return False


MISS = _Miss()

DEFAULT_TTL_SECONDS = 120.0


@dataclass(frozen=True)
class CacheEntry:
    region: str
    articles: List[Article]
    fetched_at: float


class RegionCache:
    """
    Memoize each region's article list for `ttl` seconds.

    Entries are replaced wholesale, never patched. `get_or_load` holds a
    per-region lock across the check-then-fetch so two callers on the same
    region trigger one fetch; other regions proceed independently.
    """

    def __init__(
        self,
        ttl: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl = ttl
        self.clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._locks = KeyedLocks()

    def _is_fresh(self, entry: CacheEntry) -> bool:
        return self.clock() - entry.fetched_at < self.ttl

    def get(self, region: str) -> Union[List[Article], _Miss]:
        entry = self._entries.get(region)
        if entry is None or not self._is_fresh(entry):
            return MISS
        return entry.articles

    def put(self, region: str, articles: List[Article]) -> CacheEntry:
        entry = CacheEntry(region=region, articles=articles, fetched_at=self.clock())
        self._entries[region] = entry
        return entry

    def invalidate(self, region: str) -> None:
        self._entries.pop(region, None)

    def clear(self) -> None:
        self._entries.clear()

    def get_or_load(
        self, region: str, loader: Callable[[], List[Article]]
    ) -> List[Article]:
        with self._locks.locked(region):
            cached = self.get(region)
            if cached is not MISS:
                logger.debug("Cache hit for %s", region)
                return cached
            logger.info("Cache miss for %s; fetching", region)
            articles = loader()
            self.put(region, articles)
            return articles
