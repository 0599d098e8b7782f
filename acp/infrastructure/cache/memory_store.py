"""In-process cache store with TTL support.

For single-process hosts and tests. Entries are not shared between
processes and are lost on restart.
"""

from __future__ import annotations

import fnmatch
import logging
import threading
import time
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

_MISSING = object()


class MemoryCacheStore:
    """Thread-safe dict store with monotonic-clock expiry.

    The lock is held only while reading or writing entries, never while
    compute_fn runs, so one slow rule does not block other keys.
    """

    supports_pattern_deletion = True

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        """Initialize an empty store.

        Args:
            clock: Monotonic time source (seconds); injectable for tests.
        """
        self._clock = clock
        self._entries: dict[str, tuple[Any, float | None]] = {}
        self._lock = threading.RLock()

    def _read(self, key: str) -> Any:
        entry = self._entries.get(key)
        if entry is None:
            return _MISSING
        value, deadline = entry
        if deadline is not None and deadline <= self._clock():
            del self._entries[key]
            return _MISSING
        return value

    def fetch(
        self,
        key: str,
        compute_fn: Callable[[], Any],
        *,
        expires_in: int | None = None,
        **options: Any,
    ) -> Any:
        """Return cached value for key or compute, store and return it.

        Args:
            key: Cache key.
            compute_fn: Produces the value on a miss.
            expires_in: TTL in seconds; None keeps the entry until deleted.
            **options: Ignored (accepted for protocol compatibility).
        """
        with self._lock:
            value = self._read(key)
        if value is not _MISSING:
            logger.debug("Cache HIT: %s", key)
            return value
        logger.debug("Cache MISS: %s", key)
        value = compute_fn()
        deadline = self._clock() + expires_in if expires_in is not None else None
        with self._lock:
            self._entries[key] = (value, deadline)
        logger.debug("Cache SET: %s (TTL: %ss)", key, expires_in)
        return value

    def delete_matched(self, pattern: str) -> int:
        """Delete keys matching a glob-style pattern (e.g. acp:1.0/posts/*)."""
        with self._lock:
            matched = [k for k in self._entries if fnmatch.fnmatchcase(k, pattern)]
            for key in matched:
                del self._entries[key]
        if matched:
            logger.info("Cache INVALIDATE: %s (%s keys)", pattern, len(matched))
        return len(matched)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return isinstance(key, str) and self._read(key) is not _MISSING

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
