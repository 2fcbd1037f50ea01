"""Keyed query cache with an explicit refresh scheduler."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

LOGGER = logging.getLogger(__name__)

Fetcher = Callable[[], Any]
RefreshCallback = Callable[[str, Any], None]


@dataclass
class _CacheSlot:
    fetcher: Fetcher
    value: Any = None
    fetched_at: float | None = None


class QueryCache:
    """Cache fetch results per key until they go stale or are invalidated."""

    def __init__(
        self,
        *,
        stale_seconds: float = 300,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._stale_seconds = stale_seconds
        self._clock = clock
        self._slots: dict[str, _CacheSlot] = {}
        self._lock = threading.RLock()

    def register(self, key: str, fetcher: Fetcher) -> None:
        with self._lock:
            self._slots[key] = _CacheSlot(fetcher=fetcher)

    def keys(self) -> tuple[str, ...]:
        with self._lock:
            return tuple(self._slots)

    def get(self, key: str) -> Any:
        """Return the cached value, fetching it first when missing or stale."""
        with self._lock:
            slot = self._require_slot(key)
            if slot.fetched_at is None or self._is_stale(slot.fetched_at):
                LOGGER.debug("Fetching query '%s'", key)
                slot.value = slot.fetcher()
                slot.fetched_at = self._clock()
            return slot.value

    def invalidate(self, *keys: str) -> None:
        """Mark the given keys (all keys when none are given) for refetch."""
        with self._lock:
            for key in keys or tuple(self._slots):
                self._require_slot(key).fetched_at = None

    def _is_stale(self, fetched_at: float) -> bool:
        return self._clock() - fetched_at >= self._stale_seconds

    def _require_slot(self, key: str) -> _CacheSlot:
        try:
            return self._slots[key]
        except KeyError as exc:
            raise KeyError(f"Query key not registered: {key}") from exc


class RefreshScheduler:
    """Periodically invalidate and refetch a fixed registry of cache keys."""

    def __init__(
        self,
        cache: QueryCache,
        keys: Sequence[str],
        *,
        interval_seconds: float,
        on_refresh: RefreshCallback | None = None,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("Refresh interval must be greater than zero.")
        self._cache = cache
        self._keys = tuple(keys)
        self._interval_seconds = interval_seconds
        self._on_refresh = on_refresh
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def keys(self) -> tuple[str, ...]:
        return self._keys

    def refresh_now(self) -> None:
        """Invalidate and refetch every registered key once."""
        self._cache.invalidate(*self._keys)
        for key in self._keys:
            value = self._cache.get(key)
            if self._on_refresh is not None:
                self._on_refresh(key, value)

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run, name="query-refresh-scheduler", daemon=True
        )
        self._thread.start()

    def stop(self, timeout: float | None = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the scheduler is stopped; returns True once stopped."""
        return self._stop.wait(timeout)

    def _run(self) -> None:
        while not self._stop.is_set():
            try:
                self.refresh_now()
            except Exception:  # pylint: disable=broad-exception-caught
                LOGGER.exception("Scheduled refresh of %s failed", ", ".join(self._keys))
            if self._stop.wait(self._interval_seconds):
                break
