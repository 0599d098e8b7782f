"""Process-wide selection of the active cache store.

The store is the only state shared between execution units. It is set
once at startup (set_cache_store) or built lazily from settings on first
use (ACP_CACHE_STORE_BACKEND).
"""

from __future__ import annotations

import logging
import threading

from acp.core.config import Settings, get_settings
from acp.core.constants import CACHE_BACKEND_MEMORY, CACHE_BACKEND_REDIS
from acp.infrastructure.cache.cache_protocol import CacheStoreProtocol
from acp.infrastructure.cache.memory_store import MemoryCacheStore
from acp.infrastructure.cache.redis_store import RedisCacheStore

logger = logging.getLogger(__name__)

_store: CacheStoreProtocol | None = None
_store_configured = False
_store_lock = threading.RLock()


def build_cache_store(settings: Settings | None = None) -> CacheStoreProtocol | None:
    """Build the store named by settings.cache_store_backend (None for "none")."""
    settings = settings or get_settings()
    backend = settings.cache_store_backend
    if backend == CACHE_BACKEND_MEMORY:
        logger.info("Using in-memory cache store")
        return MemoryCacheStore()
    if backend == CACHE_BACKEND_REDIS:
        logger.info(
            "Using Redis cache store: %s:%s/%s",
            settings.redis_host,
            settings.redis_port,
            settings.redis_db,
        )
        return RedisCacheStore(settings=settings)
    return None


def get_cache_store() -> CacheStoreProtocol | None:
    """Return the active store, building it from settings on first call.

    Thread-safe: guarded by a module-level RLock.
    """
    global _store, _store_configured
    with _store_lock:
        if not _store_configured:
            _store = build_cache_store()
            _store_configured = True
        return _store


def set_cache_store(store: CacheStoreProtocol | None) -> None:
    """Set the active store for the whole process (None disables external caching)."""
    global _store, _store_configured
    with _store_lock:
        _store = store
        _store_configured = True
    logger.info("Cache store set: %s", type(store).__name__ if store is not None else None)


def reset_cache_store() -> None:
    """Forget the active store; the next get_cache_store() rebuilds from settings."""
    global _store, _store_configured
    with _store_lock:
        _store = None
        _store_configured = False
