"""Cache: external store adapter, store implementations and registry.

Stores implement CacheStoreProtocol. ExternalCacheAdapter is the only
caller of a store's fetch/delete_matched; key format lives in
acp.application.services.key_builder.
"""

from acp.infrastructure.cache.adapter import ExternalCacheAdapter
from acp.infrastructure.cache.cache_protocol import CacheStoreProtocol
from acp.infrastructure.cache.memory_store import MemoryCacheStore
from acp.infrastructure.cache.redis_store import RedisCacheStore
from acp.infrastructure.cache.registry import (
    build_cache_store,
    get_cache_store,
    reset_cache_store,
    set_cache_store,
)

__all__ = [
    "CacheStoreProtocol",
    "ExternalCacheAdapter",
    "MemoryCacheStore",
    "RedisCacheStore",
    "build_cache_store",
    "get_cache_store",
    "reset_cache_store",
    "set_cache_store",
]
