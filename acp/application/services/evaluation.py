"""Rule evaluation pipeline.

A rule evaluator is a plain callable ``(policy, rule) -> result``. The
base evaluator runs the policy's predicate; each caching tier is an
optional decorator around it:

    with_rule_memo(with_external_cache(evaluate_rule))

so the per-instance memo is consulted first and, on a miss, the
external cache wraps the predicate call for rules declared cacheable.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from acp.application.services.identity_resolver import IdentityKeyResolver
from acp.application.services.key_builder import CacheKeyBuilder, default_namespace
from acp.domain.exceptions import CacheStoreNotConfiguredError
from acp.infrastructure.cache.adapter import ExternalCacheAdapter
from acp.infrastructure.cache.cache_protocol import CacheStoreProtocol
from acp.infrastructure.cache.registry import get_cache_store

if TYPE_CHECKING:
    from acp.application.services.policy import Policy

logger = logging.getLogger(__name__)

RuleEvaluator = Callable[["Policy", str], Any]


def evaluate_rule(policy: Policy, rule: str) -> Any:
    """Run the predicate with no caching."""
    return policy.compute(rule)


def with_rule_memo(inner: RuleEvaluator) -> RuleEvaluator:
    """Memoize successful results on the policy instance."""

    def evaluator(policy: Policy, rule: str) -> Any:
        return policy.rule_memo.apply_once(rule, lambda: inner(policy, rule))

    return evaluator


def with_external_cache(
    inner: RuleEvaluator,
    store_provider: Callable[[], CacheStoreProtocol | None] = get_cache_store,
    resolver: IdentityKeyResolver | None = None,
) -> RuleEvaluator:
    """Route rules declared in Policy.cache_rules through the external store.

    Other rules call inner directly.

    Args:
        inner: Evaluator producing the value on a cache miss.
        store_provider: Returns the active store (default: process-wide registry).
        resolver: Identity resolver for key parts.

    Raises (from the returned evaluator):
        CacheStoreNotConfiguredError: Rule is cacheable but no store is set.
    """

    def evaluator(policy: Policy, rule: str) -> Any:
        options = policy.cache_options(rule)
        if options is None:
            return inner(policy, rule)
        store = store_provider()
        if store is None:
            raise CacheStoreNotConfiguredError(policy.type_name(), rule)
        builder = CacheKeyBuilder(policy.key_strategy, resolver)
        key = builder.build(
            default_namespace(),
            policy.type_name(),
            rule,
            policy.context_objects,
            policy.record,
        )
        return ExternalCacheAdapter(store).fetch(key, options, lambda: inner(policy, rule))

    return evaluator


def build_rule_evaluator(
    *,
    memoize_rules: bool = True,
    external_cache: bool = True,
) -> RuleEvaluator:
    """Compose the evaluator from independent tiers."""
    evaluator: RuleEvaluator = evaluate_rule
    if external_cache:
        evaluator = with_external_cache(evaluator)
    if memoize_rules:
        evaluator = with_rule_memo(evaluator)
    return evaluator
