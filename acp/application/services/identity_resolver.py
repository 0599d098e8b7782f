"""Identity resolution: stable string identity for records and context objects.

An object picks how it is identified by exposing one of a closed set of
capabilities, checked in order:

1. HasPolicyCacheIdentity: policy_cache_key() is used verbatim. Embed a
   version or updated-at value here to get keys that invalidate themselves.
2. HasCacheIdentity: cache_key() (e.g. from an ORM or view-cache mixin).
3. A class without either capability: "<module>.<qualname>".
4. HasStableHandle: a non-None ``id``; identity is "<TypeName>::<id>".
5. Otherwise MissingIdentityError (a ConfigurationError).

Wrap values that expose none of these (strings, numbers) in CacheIdentity.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from acp.core.constants import IDENTITY_SEP, PROCESS_HANDLE_MARKER
from acp.domain.exceptions import MissingIdentityError


@runtime_checkable
class HasPolicyCacheIdentity(Protocol):
    """Object with an identity dedicated to policy caching."""

    def policy_cache_key(self) -> str:
        """Return the identity used in policy cache keys."""
        ...


@runtime_checkable
class HasCacheIdentity(Protocol):
    """Object with a generic cache identity."""

    def cache_key(self) -> str:
        """Return the object's general-purpose cache key."""
        ...


@runtime_checkable
class HasStableHandle(Protocol):
    """Object with a stable unique handle (e.g. a primary key)."""

    id: Any


@dataclass(frozen=True)
class CacheIdentity:
    """Explicit identity supplied by the caller for any value."""

    value: str

    def policy_cache_key(self) -> str:
        return self.value


class IdentityKeyResolver:
    """Resolve the cache identity of an object via its capabilities.

    Stateless; one instance may be shared freely across threads.
    """

    def resolve(self, obj: object, *, in_process: bool = False) -> str:
        """Return the identity of obj.

        Args:
            obj: Record, context object, or CacheIdentity wrapper.
            in_process: Allow a process-local fallback (object handle) when no
                capability applies. Only for keys that never leave the process.

        Returns:
            Identity string.

        Raises:
            MissingIdentityError: No capability applies and in_process is False.
        """
        if isinstance(obj, type):
            return self._resolve_class(obj)
        if isinstance(obj, HasPolicyCacheIdentity):
            return str(obj.policy_cache_key())
        if isinstance(obj, HasCacheIdentity):
            return str(obj.cache_key())
        if isinstance(obj, HasStableHandle) and obj.id is not None:
            return f"{type(obj).__name__}{IDENTITY_SEP}{obj.id}"
        if in_process:
            return f"{type(obj).__name__}{IDENTITY_SEP}{PROCESS_HANDLE_MARKER}{id(obj)}"
        raise MissingIdentityError(obj)

    def _resolve_class(self, cls: type) -> str:
        # An instance method named policy_cache_key/cache_key identifies the
        # instances, not the class; only class-bound callables count here.
        for name in ("policy_cache_key", "cache_key"):
            if isinstance(inspect.getattr_static(cls, name, None), (classmethod, staticmethod)):
                return str(getattr(cls, name)())
        return f"{cls.__module__}.{cls.__qualname__}"

    def resolve_all(self, objects: tuple[object, ...] | list[object], *, in_process: bool = False) -> tuple[str, ...]:
        """Resolve identities for objects, preserving order."""
        return tuple(self.resolve(obj, in_process=in_process) for obj in objects)


default_resolver = IdentityKeyResolver()
