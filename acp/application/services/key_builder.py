"""External cache key composition.

Default key format (CACHE_KEY_SEP = "/"):

    <namespace>/<ctx identity>/.../<record identity>/<PolicyType>/<rule>

The key is a pure function of its parts, so it stays stable for as long
as the namespace does. Invalidation therefore happens by changing an
identity, by changing the namespace, or by deleting a predictable key
shape with ExternalCacheAdapter.delete_matched.
"""

from __future__ import annotations

from collections.abc import Sequence

from acp import __version__
from acp.application.services.identity_resolver import (
    IdentityKeyResolver,
    default_resolver,
)
from acp.core.config import get_settings
from acp.core.constants import CACHE_KEY_SEP, CACHE_PRODUCT_PREFIX
from acp.domain.policy import DEFAULT_KEY_STRATEGY, KeyParts, KeyStrategy


def version_namespace(version: str = __version__) -> str:
    """Return "acp:<major>.<minor>" for a package version string."""
    major, _, rest = version.partition(".")
    minor = rest.partition(".")[0] or "0"
    return f"{CACHE_PRODUCT_PREFIX}:{major}.{minor}"


def default_namespace() -> str:
    """Namespace for keys whose policy type does not override it.

    Settings.cache_namespace wins when set; otherwise the package
    major.minor version, so an upgrade strands all older keys.
    """
    return get_settings().cache_namespace or version_namespace()


def join_context(identities: Sequence[str]) -> str:
    """Join context identities in declared order."""
    return CACHE_KEY_SEP.join(identities)


def compose_rule_key(parts: KeyParts) -> str:
    """Default full key from resolved parts."""
    segments = [parts.namespace]
    if parts.context:
        segments.append(parts.context)
    segments.extend([parts.record, parts.policy_type, parts.rule])
    return CACHE_KEY_SEP.join(segments)


class CacheKeyBuilder:
    """Build external cache keys for one policy type's strategy."""

    def __init__(
        self,
        strategy: KeyStrategy = DEFAULT_KEY_STRATEGY,
        resolver: IdentityKeyResolver | None = None,
    ) -> None:
        self.strategy = strategy
        self.resolver = resolver or default_resolver

    def parts(
        self,
        namespace: str,
        policy_type_name: str,
        rule_name: str,
        context_objects: Sequence[object],
        record: object,
    ) -> KeyParts:
        """Resolve every key component, applying namespace and join overrides."""
        if self.strategy.namespace is not None:
            namespace = self.strategy.namespace()
        identities = self.resolver.resolve_all(list(context_objects))
        joiner = self.strategy.context_join or join_context
        return KeyParts(
            namespace=namespace,
            context_identities=identities,
            context=joiner(identities),
            record=self.resolver.resolve(record),
            policy_type=policy_type_name,
            rule=rule_name,
        )

    def build(
        self,
        namespace: str,
        policy_type_name: str,
        rule_name: str,
        context_objects: Sequence[object],
        record: object,
    ) -> str:
        """Return the full cache key.

        Args:
            namespace: Default namespace (replaced if the strategy overrides it).
            policy_type_name: Declared name of the policy type.
            rule_name: Resolved rule name.
            context_objects: Authorization context objects in declared order.
            record: Record being authorized.

        Raises:
            MissingIdentityError: A context object or the record has no identity.
        """
        parts = self.parts(namespace, policy_type_name, rule_name, context_objects, record)
        compose = self.strategy.rule_key or compose_rule_key
        return compose(parts)
