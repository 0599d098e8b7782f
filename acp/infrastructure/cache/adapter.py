"""External cache adapter: fetch-or-compute over the configured store.

Thin on purpose. The adapter resolves options and delegates to the
store's own fetch-or-compute; it never performs a separate read then
write, so it adds no consistency gap on top of the store's.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from acp.core.config import get_settings
from acp.domain.exceptions import PatternDeletionUnsupportedError
from acp.domain.policy import CacheOptions
from acp.infrastructure.cache.cache_protocol import CacheStoreProtocol
from acp.shared.telemetry.tracing import add_span_attributes, traced

logger = logging.getLogger(__name__)

_DEFAULT_TTL_FROM_SETTINGS = object()


class ExternalCacheAdapter:
    """Swappable front for a durable cache store."""

    def __init__(
        self,
        store: CacheStoreProtocol,
        default_ttl: int | None | object = _DEFAULT_TTL_FROM_SETTINGS,
    ) -> None:
        """Initialize the adapter.

        Args:
            store: Backing store implementing CacheStoreProtocol.
            default_ttl: TTL (seconds) for options without expires_in;
                defaults to Settings.cache_default_ttl. None means no expiry.
        """
        self.store = store
        if default_ttl is _DEFAULT_TTL_FROM_SETTINGS:
            default_ttl = get_settings().cache_default_ttl
        self.default_ttl: int | None = default_ttl  # type: ignore[assignment]

    @traced("acp.cache.fetch")
    def fetch(
        self,
        key: str,
        options: CacheOptions,
        compute_fn: Callable[[], Any],
    ) -> Any:
        """Return the stored value for key, or compute, store and return it.

        Errors from compute_fn propagate unchanged and nothing is stored.
        Store failures surface as StoreError.
        """
        expires_in = options.ttl_seconds(self.default_ttl)
        add_span_attributes(**{"acp.cache.key": key, "acp.cache.store": type(self.store).__name__})
        return self.store.fetch(key, compute_fn, expires_in=expires_in, **dict(options.extra))

    @traced("acp.cache.delete_matched")
    def delete_matched(self, pattern: str) -> int:
        """Delete every key matching pattern; return the count.

        Raises:
            PatternDeletionUnsupportedError: The store cannot delete by pattern.
        """
        if not getattr(self.store, "supports_pattern_deletion", False):
            raise PatternDeletionUnsupportedError(type(self.store).__name__, pattern)
        deleted = self.store.delete_matched(pattern)
        logger.info("Deleted %s cached rule results matching %s", deleted, pattern)
        return deleted
