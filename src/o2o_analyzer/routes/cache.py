"""Time-bounded, single-slot cache for the artisan route table."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable

from o2o_analyzer.config import ROUTE_CACHE_TTL_MS
from o2o_analyzer.errors import CollaboratorError, UsageError
from o2o_analyzer.types import RouteRecord

logger = logging.getLogger(__name__)

RouteSource = Callable[[], list[RouteRecord]]


class RouteCache:
    """Serves the last route listing until it is `ttl_ms` old.

    The listing and its timestamp are stored as one tuple and swapped in a
    single assignment, so a reader sees either the old pair or the new one. A
    failed refresh raises and leaves the previous pair in place.
    """

    def __init__(
        self,
        refresh: RouteSource,
        *,
        ttl_ms: int = ROUTE_CACHE_TTL_MS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._refresh = refresh
        self.ttl_ms = ttl_ms
        self._clock = clock
        self._entry: tuple[list[RouteRecord], float] | None = None
        self._lock = threading.Lock()
        self.refresh_count = 0

    def _now_ms(self) -> float:
        return self._clock() * 1000.0

    def _is_fresh(self, now_ms: float) -> bool:
        entry = self._entry
        return entry is not None and (now_ms - entry[1]) < self.ttl_ms

    def is_fresh(self) -> bool:
        return self._is_fresh(self._now_ms())

    def age_ms(self) -> float | None:
        entry = self._entry
        if entry is None:
            return None
        return self._now_ms() - entry[1]

    def get_routes(self) -> list[RouteRecord]:
        with self._lock:
            now_ms = self._now_ms()
            entry = self._entry
            if entry is not None and self._is_fresh(now_ms):
                logger.debug("route cache hit (%d routes)", len(entry[0]))
                return entry[0]

            logger.info("refreshing route cache")
            try:
                routes = list(self._refresh())
            except UsageError:
                raise
            except Exception as exc:
                raise CollaboratorError(f"Unable to retrieve routes: {exc}") from exc

            self.refresh_count += 1
            self._entry = (routes, now_ms)
            return routes
