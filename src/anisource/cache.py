"""
Process-wide, time-expiring store for resolved artifacts.

Keys are namespaced by operation (``player_{id}``, ``search_{query}``,
``series_{id}``, ``content_type_{id}``, ``source_{id}_{server}``) and every
entry carries its own expiry. ``get_or_compute`` adds a single-flight guarantee:
while one thread computes a key, every other thread asking for the same key
waits for that result instead of repeating the upstream round trips.
"""

import logging
import threading
import time
from concurrent.futures import Future
from typing import Any, Callable, Dict, Optional, Tuple

from . import config

_MISSING = object()


class ProviderCache:
    """Keyed TTL cache with per-key in-flight deduplication."""

    def __init__(
        self,
        default_ttl: float = config.SHORT_TTL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.default_ttl = default_ttl
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: Dict[str, Tuple[float, Any]] = {}
        self._inflight: Dict[str, Future] = {}

    def _lookup(self, key: str) -> Any:
        # Caller holds self._lock
        entry = self._entries.get(key)
        if entry is None:
            return _MISSING
        expires_at, value = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return _MISSING
        return value

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            value = self._lookup(key)
        return default if value is _MISSING else value

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return self._lookup(key) is not _MISSING

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        ttl = self.default_ttl if ttl is None else ttl
        with self._lock:
            self._entries[key] = (self._clock() + ttl, value)

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            now = self._clock()
            return sum(1 for expires_at, _ in self._entries.values() if expires_at > now)

    def get_or_compute(
        self, key: str, compute: Callable[[], Any], ttl: Optional[float] = None
    ) -> Any:
        """
        Return the cached value for ``key`` or compute and store it.

        Only one ``compute`` runs per key at a time. Concurrent callers block
        until the owner finishes and then share its value, or re-raise its
        exception. Failures are never stored.
        """
        with self._lock:
            value = self._lookup(key)
            if value is not _MISSING:
                logging.debug("Cache hit for %s", key)
                return value
            pending = self._inflight.get(key)
            if pending is None:
                pending = Future()
                self._inflight[key] = pending
                is_owner = True
            else:
                is_owner = False

        if not is_owner:
            logging.debug("Waiting for in-flight computation of %s", key)
            return pending.result()

        try:
            value = compute()
        except BaseException as err:
            with self._lock:
                self._inflight.pop(key, None)
            pending.set_exception(err)
            raise

        self.set(key, value, ttl)
        with self._lock:
            self._inflight.pop(key, None)
        pending.set_result(value)
        return value


_default_cache: Optional[ProviderCache] = None
_default_cache_lock = threading.Lock()


def get_default_cache() -> ProviderCache:
    """Return the shared cache used when a component is built without one."""
    global _default_cache
    with _default_cache_lock:
        if _default_cache is None:
            _default_cache = ProviderCache()
        return _default_cache
