"""Evaluation scope management using contextvars.

One scope is bound per execution unit (thread or asyncio task), so two
concurrent authorizations never share policy instances. Similar to a
per-request cache that is cleared between requests.

Usage:
    with scope_manager.new_scope():
        authorizer.allowed_to(PostPolicy, post, "show")

    # Long-lived hosts without a natural "with" block:
    scope = scope_manager.begin()
    ...
    scope_manager.clear(scope)

Scope storage is only read and written through ScopeManager.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Hashable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from itertools import count
from typing import Any, TypeVar

from acp.core.config import get_settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

# default=None: a mutable default would be shared by every context
_current_scope: ContextVar[Scope | None] = ContextVar("acp_evaluation_scope", default=None)

_scope_ids = count(1)


@dataclass(frozen=True)
class ScopeOptions:
    """Memoization toggles of one scope.

    Attributes:
        instance_memoization: Authorizers may reuse policy instances they built.
        scope_memoization: Policy instances are shared through the scope's store.
    """

    instance_memoization: bool = False
    scope_memoization: bool = False

    @classmethod
    def from_settings(cls) -> ScopeOptions:
        """Options for a scope opened by an integrated host."""
        settings = get_settings()
        return cls(
            instance_memoization=settings.instance_memoization,
            scope_memoization=settings.scope_memoization,
        )


BARE_SCOPE_OPTIONS = ScopeOptions()


class Scope:
    """Bounded lifetime (e.g. one request) owning memoized policy instances."""

    def __init__(self, options: ScopeOptions = BARE_SCOPE_OPTIONS) -> None:
        self.id = next(_scope_ids)
        self.options = options
        self._instances: dict[Hashable, Any] = {}

    def __len__(self) -> int:
        return len(self._instances)

    def __repr__(self) -> str:
        return f"Scope(id={self.id}, options={self.options!r}, size={len(self)})"


class ScopeManager:
    """Owns scope binding and is the only code that touches scope storage."""

    def current_scope(self) -> Scope:
        """Return the scope bound to this execution unit.

        A bare scope (memoization off) is bound on first use when the host
        opened none, so nothing is retained across units of work by default.
        """
        scope = _current_scope.get()
        if scope is None:
            scope = Scope(BARE_SCOPE_OPTIONS)
            _current_scope.set(scope)
        return scope

    def begin(
        self,
        options: ScopeOptions | None = None,
        **toggles: bool,
    ) -> Scope:
        """Bind a fresh scope without scoped acquisition; pair with clear()."""
        scope = Scope(self._options(options, toggles))
        _current_scope.set(scope)
        logger.debug("Evaluation scope %s started", scope.id)
        return scope

    @contextmanager
    def new_scope(
        self,
        options: ScopeOptions | None = None,
        **toggles: bool,
    ) -> Iterator[Scope]:
        """Bind a fresh scope for the block; cleared and unbound on any exit.

        Args:
            options: Toggles for the scope; defaults to ScopeOptions.from_settings().
            **toggles: instance_memoization / scope_memoization overrides.
        """
        scope = Scope(self._options(options, toggles))
        token = _current_scope.set(scope)
        logger.debug("Evaluation scope %s opened", scope.id)
        try:
            yield scope
        finally:
            self.clear(scope)
            _current_scope.reset(token)

    def with_new_scope(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Run fn inside a fresh scope and return its result."""
        with self.new_scope():
            return fn(*args, **kwargs)

    def clear(self, scope: Scope | None = None) -> None:
        """Drop every memoized instance of scope (default: the current one)."""
        scope = scope if scope is not None else _current_scope.get()
        if scope is None:
            return
        size = len(scope._instances)
        scope._instances.clear()
        logger.debug("Evaluation scope %s cleared (%s instances)", scope.id, size)

    def lookup(self, scope: Scope, key: Hashable) -> Any | None:
        """Return the instance stored under key, or None."""
        return scope._instances.get(key)

    def store(self, scope: Scope, key: Hashable, value: Any) -> None:
        """Store value under key in scope."""
        scope._instances[key] = value

    @staticmethod
    def _options(options: ScopeOptions | None, toggles: dict[str, bool]) -> ScopeOptions:
        unknown = set(toggles) - {"instance_memoization", "scope_memoization"}
        if unknown:
            raise TypeError(f"Unknown scope toggles: {', '.join(sorted(unknown))}")
        base = options or ScopeOptions.from_settings()
        if not toggles:
            return base
        return ScopeOptions(
            instance_memoization=toggles.get("instance_memoization", base.instance_memoization),
            scope_memoization=toggles.get("scope_memoization", base.scope_memoization),
        )


scope_manager = ScopeManager()
