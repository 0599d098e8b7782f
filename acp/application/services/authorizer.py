"""Authorizer: policy lookup and rule checks for one caller's context.

Policy instances are reused at two levels before a new one is built:

- instance memoization: the authorizer keeps the policies it built
  (ScopeOptions.instance_memoization);
- scope memoization: policies are shared through the current evaluation
  scope, so separate authorizers in one request reuse them
  (ScopeOptions.scope_memoization).

Both toggles come from the current scope; a bare scope turns both off.
"""

from __future__ import annotations

import logging
from typing import Any

from acp.application.services.evaluation import RuleEvaluator, build_rule_evaluator
from acp.application.services.identity_resolver import (
    IdentityKeyResolver,
    default_resolver,
)
from acp.application.services.instance_cache import InstanceCache
from acp.application.services.policy import Policy
from acp.domain.exceptions import AccessDeniedException, MissingContextError
from acp.shared.scope import Scope, ScopeManager, ScopeOptions, scope_manager

logger = logging.getLogger(__name__)


class Authorizer:
    """Entry point for "may this context apply this rule to this record"."""

    def __init__(
        self,
        *,
        manager: ScopeManager | None = None,
        instance_cache: InstanceCache | None = None,
        evaluator: RuleEvaluator | None = None,
        resolver: IdentityKeyResolver | None = None,
        **context: Any,
    ) -> None:
        """Initialize with the caller's authorization context.

        Args:
            manager: Scope manager (default: process-wide scope_manager).
            instance_cache: Instance cache used for both memoization tiers.
            evaluator: Rule evaluator handed to every policy built here.
            resolver: Identity resolver for instance keys.
            **context: Authorization context (e.g. user=current_user).
        """
        self.context = context
        self.manager = manager or scope_manager
        self.instance_cache = instance_cache or InstanceCache(manager=self.manager)
        self.evaluator = evaluator or build_rule_evaluator()
        self.resolver = resolver or default_resolver
        self._policies = Scope(ScopeOptions(instance_memoization=True))
        self._scope_id: int | None = None

    def _context_for(self, policy_type: type[Policy]) -> dict[str, Any]:
        missing = [name for name in policy_type.authorize if name not in self.context]
        if missing:
            raise MissingContextError(policy_type.type_name(), missing[0])
        return {name: self.context[name] for name in policy_type.authorize}

    def policy_for(self, policy_type: type[Policy], record: Any = None) -> Policy:
        """Return a policy instance for record, reusing a memoized one when enabled."""
        context = self._context_for(policy_type)

        def build() -> Policy:
            return policy_type(record, evaluator=self.evaluator, **context)

        scope = self.manager.current_scope()
        if scope.id != self._scope_id:
            # policies built in an earlier scope are never handed out in a new one
            self.manager.clear(self._policies)
            self._scope_id = scope.id
        options = scope.options
        if not (options.instance_memoization or options.scope_memoization):
            return build()

        record_identity = self.resolver.resolve(record, in_process=True)
        context_identities = self.resolver.resolve_all(list(context.values()), in_process=True)
        type_name = self.resolver.resolve(policy_type)

        def from_scope() -> Policy:
            if not options.scope_memoization:
                return build()
            return self.instance_cache.get_or_create(
                scope,
                record_identity,
                context_identities,
                type_name,
                build,
            )

        if not options.instance_memoization:
            return from_scope()
        return self.instance_cache.get_or_create(
            self._policies,
            record_identity,
            context_identities,
            type_name,
            from_scope,
        )

    def apply(self, policy_type: type[Policy], record: Any, rule: str) -> Any:
        """Return the raw rule result (may be any serializable value)."""
        return self.policy_for(policy_type, record).apply(rule)

    def allowed_to(self, policy_type: type[Policy], record: Any, rule: str) -> bool:
        """Return True if rule evaluates truthy for record."""
        allowed = bool(self.apply(policy_type, record, rule))
        logger.debug("Rule %s.%s on %r: %s", policy_type.type_name(), rule, record, allowed)
        return allowed

    def authorize(self, policy_type: type[Policy], record: Any, rule: str) -> None:
        """Raise AccessDeniedException unless rule evaluates truthy.

        Configuration, store and rule errors propagate unchanged, so a
        broken cache never reads as a denial.
        """
        if not self.allowed_to(policy_type, record, rule):
            raise AccessDeniedException(policy_type.type_name(), policy_type.resolve_rule(rule))

    def clear_memoized_policies(self) -> None:
        """Drop the policies this authorizer has memoized."""
        self.manager.clear(self._policies)
