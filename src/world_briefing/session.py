"""Interactive session: current region, periodic refresh and live streams.

The most recent `select_region` call is authoritative. Each selection gets a
fresh token; a refresh task bound to an older token does nothing, and switching
regions cancels the previous task and any stream still being delivered.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Iterator, List, Optional

from .models import Article
from .pipeline import BriefingContext, get_region_articles, refresh_region, summarize_region
from .sources import get_sources, normalize_region

logger = logging.getLogger(__name__)

DEFAULT_REFRESH_INTERVAL = 60.0

RefreshCallback = Callable[[str, List[Article]], None]


class RefreshTask:
    """Repeating timer that recomputes one region while its selection is current."""

    def __init__(
        self,
        session: "BriefingSession",
        region: str,
        token: int,
        interval: float,
        on_refresh: Optional[RefreshCallback] = None,
        timer_factory: Callable[..., threading.Timer] = threading.Timer,
    ) -> None:
        self.session = session
        self.region = region
        self.token = token
        self.interval = interval
        self.on_refresh = on_refresh
        self.timer_factory = timer_factory
        self._timer: Optional[threading.Timer] = None
        self._cancelled = threading.Event()
        self._lock = threading.Lock()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def start(self) -> None:
        self._schedule()

    def _schedule(self) -> None:
        with self._lock:
            if self.cancelled:
                return
            self._timer = self.timer_factory(self.interval, self._tick)
            self._timer.daemon = True
            self._timer.start()

    def _tick(self) -> None:
        if self.cancelled:
            return
        try:
            self.run_once()
        finally:
            self._schedule()

    def run_once(self) -> bool:
        """Refresh now if still current; return whether a refresh happened."""
        if self.cancelled or not self.session.is_current(self.region, self.token):
            logger.debug("Skipping stale refresh for %s", self.region)
            return False
        try:
            articles = refresh_region(self.region, self.session.context)
            if self.on_refresh and self.session.is_current(self.region, self.token):
                self.on_refresh(self.region, articles)
        except Exception:
            logger.exception("Background refresh failed for %s", self.region)
            return False
        logger.info("Refreshed %s (%d articles)", self.region, len(articles))
        return True

    def cancel(self) -> None:
        with self._lock:
            self._cancelled.set()
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None


class BriefingSession:
    def __init__(
        self,
        context: BriefingContext,
        refresh_interval: Optional[float] = None,
        on_refresh: Optional[RefreshCallback] = None,
        timer_factory: Callable[..., threading.Timer] = threading.Timer,
    ) -> None:
        if refresh_interval is None:
            settings = context.settings
            refresh_interval = (
                settings.refresh_interval_seconds if settings else DEFAULT_REFRESH_INTERVAL
            )
        self.context = context
        self.refresh_interval = refresh_interval
        self.on_refresh = on_refresh
        self.timer_factory = timer_factory
        self._lock = threading.Lock()
        self._region: Optional[str] = None
        self._token = 0
        self._refresh: Optional[RefreshTask] = None
        self._stream_cancel: Optional[threading.Event] = None

    @property
    def current_region(self) -> Optional[str]:
        return self._region

    @property
    def refresh_task(self) -> Optional[RefreshTask]:
        return self._refresh

    def is_current(self, region: str, token: int) -> bool:
        with self._lock:
            return self._region == region and self._token == token

    def select_region(self, region: str) -> List[Article]:
        """Make `region` current, restart its refresh task and return its articles."""
        get_sources(region)
        key = normalize_region(region)
        with self._lock:
            self._token += 1
            self._region = key
            token = self._token
            previous_task, self._refresh = self._refresh, None
            previous_stream, self._stream_cancel = self._stream_cancel, None
        if previous_task is not None:
            previous_task.cancel()
        if previous_stream is not None:
            previous_stream.set()

        task = RefreshTask(
            self,
            key,
            token,
            self.refresh_interval,
            on_refresh=self.on_refresh,
            timer_factory=self.timer_factory,
        )
        with self._lock:
            if self._token != token:
                # A newer selection won the race; it owns the refresh slot.
                return get_region_articles(key, self.context)
            self._refresh = task
        task.start()
        return get_region_articles(key, self.context)

    def start_stream(self, text: str) -> Iterator[str]:
        """Stream `text`, cancelling whatever stream this session had running."""
        cancel = threading.Event()
        with self._lock:
            previous, self._stream_cancel = self._stream_cancel, cancel
        if previous is not None:
            previous.set()
        return self.context.streamer.stream(text, cancel=cancel)

    def summarize(self, country: Optional[str] = None) -> Iterator[str]:
        with self._lock:
            region = self._region
        if region is None:
            raise RuntimeError("Select a region before summarizing.")
        return self.start_stream(summarize_region(region, self.context, country))

    def close(self) -> None:
        with self._lock:
            task, self._refresh = self._refresh, None
            stream, self._stream_cancel = self._stream_cancel, None
            self._region = None
            self._token += 1
        if task is not None:
            task.cancel()
        if stream is not None:
            stream.set()
