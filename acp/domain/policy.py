"""Value objects a policy type declares: cache options and key strategy.

A policy type opts a rule into the external cache with CacheOptions and
may replace any part of the external key with a KeyStrategy. Both are
immutable so one declaration can be shared by every instance of the type.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any


@dataclass(frozen=True)
class CacheOptions:
    """Store options for one cacheable rule.

    Attributes:
        expires_in: TTL as seconds or timedelta; None uses the configured default.
        extra: Additional store-specific options passed through unchanged.
    """

    expires_in: int | float | timedelta | None = None
    extra: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        seconds = self._seconds(self.expires_in)
        if seconds is not None and seconds <= 0:
            raise ValueError(f"expires_in must be positive, got {self.expires_in!r}")

    @staticmethod
    def _seconds(value: int | float | timedelta | None) -> float | None:
        if value is None:
            return None
        if isinstance(value, timedelta):
            return value.total_seconds()
        return float(value)

    def ttl_seconds(self, default: int | None = None) -> int | None:
        """Return TTL in whole seconds (rounded up), falling back to default."""
        seconds = self._seconds(self.expires_in)
        if seconds is None:
            return default
        return max(1, math.ceil(seconds))


@dataclass(frozen=True)
class KeyParts:
    """Resolved components of one external cache key."""

    namespace: str
    context_identities: tuple[str, ...]
    context: str
    record: str
    policy_type: str
    rule: str


@dataclass(frozen=True)
class KeyStrategy:
    """Override points for composing external cache keys.

    Each provider replaces one composition step entirely; None keeps the
    default. Declared once per policy type (Policy.key_strategy).

    Attributes:
        namespace: () -> namespace string. Return a new value to invalidate
            every key of the policy type at once.
        context_join: (identities) -> joined context part.
        rule_key: (KeyParts) -> full key. Use a predictable shape when the
            keys must later be removed with delete_matched.
    """

    namespace: Callable[[], str] | None = None
    context_join: Callable[[Sequence[str]], str] | None = None
    rule_key: Callable[[KeyParts], str] | None = None


DEFAULT_KEY_STRATEGY = KeyStrategy()
