"""acp: caching and memoization layer for policy rule evaluation.

Four tiers, innermost first: per-policy rule memo, authorizer-local
instance memoization, per-scope instance memoization, and a pluggable
external cache store for rules declared cacheable.

Usage:
    class PostPolicy(Policy):
        authorize = ("user",)
        cache_rules = {"show": CacheOptions(expires_in=3600)}

        def show(self) -> bool:
            return self.record.published or self.user.admin

    set_cache_store(MemoryCacheStore())
    with scope_manager.new_scope():
        Authorizer(user=current_user).allowed_to(PostPolicy, post, "show")
"""

__version__ = "1.0.0"

from acp.application.services.authorizer import Authorizer
from acp.application.services.identity_resolver import (
    CacheIdentity,
    IdentityKeyResolver,
)
from acp.application.services.instance_cache import InstanceCache
from acp.application.services.key_builder import CacheKeyBuilder, default_namespace
from acp.application.services.policy import Policy
from acp.application.services.rule_memo import RuleMemo
from acp.domain.exceptions import (
    AccessDeniedException,
    AcpException,
    CacheStoreNotConfiguredError,
    ConfigurationError,
    StoreError,
)
from acp.domain.policy import CacheOptions, KeyParts, KeyStrategy
from acp.infrastructure.cache import (
    ExternalCacheAdapter,
    MemoryCacheStore,
    RedisCacheStore,
    get_cache_store,
    set_cache_store,
)
from acp.shared.scope import Scope, ScopeManager, ScopeOptions, scope_manager

__all__ = [
    "__version__",
    "AccessDeniedException",
    "AcpException",
    "Authorizer",
    "CacheIdentity",
    "CacheKeyBuilder",
    "CacheOptions",
    "CacheStoreNotConfiguredError",
    "ConfigurationError",
    "ExternalCacheAdapter",
    "IdentityKeyResolver",
    "InstanceCache",
    "KeyParts",
    "KeyStrategy",
    "MemoryCacheStore",
    "Policy",
    "RedisCacheStore",
    "RuleMemo",
    "Scope",
    "ScopeManager",
    "ScopeOptions",
    "StoreError",
    "default_namespace",
    "get_cache_store",
    "scope_manager",
    "set_cache_store",
]
