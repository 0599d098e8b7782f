"""Redis-backed cache store for rule results.

Values are JSON-encoded; writes use SET with EX so expiry is atomic with
the write. Unlike a best-effort performance cache, every Redis failure is
raised as StoreError: an authorization decision must never fall back to
a default because the cache is down.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any

import redis

from acp.core.config import Settings, get_settings
from acp.core.constants import DELETE_MATCHED_CHUNK_SIZE
from acp.domain.exceptions import StoreError

logger = logging.getLogger(__name__)


class RedisCacheStore:
    """Synchronous Redis store with TTL support and pattern deletion."""

    supports_pattern_deletion = True

    def __init__(self, redis_client: redis.Redis | None = None, settings: Settings | None = None) -> None:
        """Initialize the store.

        Args:
            redis_client: Optional Redis client for testing or DI; built from
                settings when omitted.
            settings: Settings for connection parameters (default: get_settings()).
        """
        self.settings = settings or get_settings()
        self.redis = redis_client if redis_client is not None else self._build_client(self.settings)

    @staticmethod
    def _build_client(settings: Settings) -> redis.Redis:
        return redis.Redis(
            host=settings.redis_host,
            port=settings.redis_port,
            db=settings.redis_db,
            password=settings.redis_password.get_secret_value() if settings.redis_password else None,
            decode_responses=True,
            socket_connect_timeout=settings.redis_socket_timeout,
            socket_timeout=settings.redis_socket_timeout,
            socket_keepalive=True,
        )

    def is_available(self) -> bool:
        """Return True if Redis answers PING."""
        try:
            return bool(self.redis.ping())
        except redis.RedisError as e:
            logger.warning("Redis ping failed: %s", e)
            return False

    def fetch(
        self,
        key: str,
        compute_fn: Callable[[], Any],
        *,
        expires_in: int | None = None,
        **options: Any,
    ) -> Any:
        """Return cached value (JSON-decoded) or compute, store and return it.

        Args:
            key: Cache key.
            compute_fn: Produces the value on a miss; its exceptions propagate as-is.
            expires_in: TTL in seconds; None stores without expiry.
            **options: Extra SET arguments (e.g. nx=True).

        Raises:
            StoreError: Redis read/write failed or a value could not be (de)serialized.
        """
        try:
            raw = self.redis.get(key)
        except redis.RedisError as e:
            logger.exception("Cache get error for key %s", key)
            raise StoreError("get", str(e), key=key) from e
        if raw is not None:
            logger.debug("Cache HIT: %s", key)
            try:
                return json.loads(raw)
            except ValueError as e:
                raise StoreError("get", f"stored value is not valid JSON: {e}", key=key) from e

        logger.debug("Cache MISS: %s", key)
        value = compute_fn()
        try:
            serialized = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise StoreError("set", f"value is not JSON-serializable: {e}", key=key) from e
        try:
            self.redis.set(key, serialized, ex=expires_in, **options)
        except redis.RedisError as e:
            logger.exception("Cache set error for key %s", key)
            raise StoreError("set", str(e), key=key) from e
        logger.debug("Cache SET: %s (TTL: %ss)", key, expires_in)
        return value

    def delete_matched(self, pattern: str) -> int:
        """Delete all keys matching pattern using SCAN + batched UNLINK (non-blocking).

        Uses scan_iter to avoid KEYS blocking; collects keys in chunks and
        UNLINKs each chunk in one pipeline round-trip.

        Args:
            pattern: Redis SCAN match pattern (e.g. acp:1.0/posts/Post::42/*).

        Returns:
            Number of keys deleted.

        Raises:
            StoreError: Redis SCAN or UNLINK failed.
        """
        deleted = 0
        try:
            chunk: list[str] = []
            for key in self.redis.scan_iter(match=pattern):
                chunk.append(key)
                if len(chunk) >= DELETE_MATCHED_CHUNK_SIZE:
                    deleted += self._unlink(chunk)
                    chunk = []
            if chunk:
                deleted += self._unlink(chunk)
        except redis.RedisError as e:
            logger.exception("Cache delete_matched error for %s", pattern)
            raise StoreError("delete_matched", str(e), pattern=pattern) from e
        if deleted > 0:
            logger.info("Cache INVALIDATE: %s (%s keys)", pattern, deleted)
        return deleted

    def _unlink(self, keys: list[str]) -> int:
        with self.redis.pipeline(transaction=False) as pipe:
            pipe.unlink(*keys)
            results = pipe.execute()
        return sum(int(r or 0) for r in results)
