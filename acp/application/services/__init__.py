"""Application services: identity, keys, memoization tiers, evaluation, authorizer."""

from acp.application.services.authorizer import Authorizer
from acp.application.services.evaluation import (
    RuleEvaluator,
    build_rule_evaluator,
    evaluate_rule,
    with_external_cache,
    with_rule_memo,
)
from acp.application.services.identity_resolver import (
    CacheIdentity,
    HasCacheIdentity,
    HasPolicyCacheIdentity,
    HasStableHandle,
    IdentityKeyResolver,
)
from acp.application.services.instance_cache import InstanceCache
from acp.application.services.key_builder import (
    CacheKeyBuilder,
    compose_rule_key,
    default_namespace,
    join_context,
    version_namespace,
)
from acp.application.services.policy import Policy
from acp.application.services.rule_memo import RuleMemo

__all__ = [
    "Authorizer",
    "CacheIdentity",
    "CacheKeyBuilder",
    "HasCacheIdentity",
    "HasPolicyCacheIdentity",
    "HasStableHandle",
    "IdentityKeyResolver",
    "InstanceCache",
    "Policy",
    "RuleEvaluator",
    "RuleMemo",
    "build_rule_evaluator",
    "compose_rule_key",
    "default_namespace",
    "evaluate_rule",
    "join_context",
    "version_namespace",
    "with_external_cache",
    "with_rule_memo",
]
