"""Reuse of policy instances within one scope."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import TypeVar

from acp.shared.scope import Scope, ScopeManager, scope_manager

logger = logging.getLogger(__name__)

P = TypeVar("P")

InstanceKey = tuple[str, tuple[str, ...], str]


class InstanceCache:
    """(record identity, context identities, policy type) -> policy instance.

    Entries live in the scope passed in and are dropped only when that
    scope is cleared. When disabled, every call builds a new instance.
    """

    def __init__(self, enabled: bool = True, manager: ScopeManager | None = None) -> None:
        self.enabled = enabled
        self.manager = manager or scope_manager

    @staticmethod
    def key(
        record_identity: str,
        context_identities: Sequence[str],
        policy_type_name: str,
    ) -> InstanceKey:
        return (record_identity, tuple(context_identities), policy_type_name)

    def get_or_create(
        self,
        scope: Scope,
        record_identity: str,
        context_identities: Sequence[str],
        policy_type_name: str,
        factory: Callable[[], P],
    ) -> P:
        """Return the scope's instance for the key, building it with factory on a miss."""
        if not self.enabled:
            return factory()
        key = self.key(record_identity, context_identities, policy_type_name)
        instance = self.manager.lookup(scope, key)
        if instance is not None:
            logger.debug("Policy instance HIT: %s in scope %s", key, scope.id)
            return instance
        instance = factory()
        self.manager.store(scope, key, instance)
        return instance
