"""Per-region locks for the article cache."""

from __future__ import annotations

from contextlib import contextmanager
from threading import Lock
from typing import Dict, Iterator


class KeyedLocks:
    """One lazily created Lock per key; distinct keys never block each other."""

    def __init__(self) -> None:
        self._by_key: Dict[str, Lock] = {}
        self._registry = Lock()

    def lock_for(self, key: str) -> Lock:
        with self._registry:
            return self._by_key.setdefault(key, Lock())

    @contextmanager
    def locked(self, key: str) -> Iterator[None]:
        with self.lock_for(key):
            yield
