"""Policy base class: the declaration surface a policy type fills in.

Rules are public methods named after the rule. Caching is declared, not
coded: list the ordered authorization context in ``authorize``, opt rules
into the external cache in ``cache_rules`` and, when the default key is
not suitable, supply a ``key_strategy``.

    class PostPolicy(Policy):
        authorize = ("user",)
        cache_rules = {"show": CacheOptions(expires_in=timedelta(hours=1))}
        rule_aliases = {"edit": "update"}

        def show(self) -> bool:
            return self.record.published or self.user.admin

        def update(self) -> bool:
            return self.record.author_id == self.user.id
"""

from __future__ import annotations

import inspect
from collections.abc import Mapping
from typing import Any, ClassVar

from acp.application.services.evaluation import RuleEvaluator, build_rule_evaluator
from acp.application.services.rule_memo import RuleMemo
from acp.domain.exceptions import MissingContextError, UnknownRuleError
from acp.domain.policy import DEFAULT_KEY_STRATEGY, CacheOptions, KeyStrategy


class Policy:
    """Pairs a record with an authorization context and rule logic.

    Instances are cheap and short-lived; each owns a RuleMemo, so a rule
    runs at most once per instance when it succeeds.
    """

    # Authorization context entries, in the order they appear in cache keys
    authorize: ClassVar[tuple[str, ...]] = ()
    # Rule name -> store options for rules cached in the external store
    cache_rules: ClassVar[Mapping[str, CacheOptions]] = {}
    key_strategy: ClassVar[KeyStrategy] = DEFAULT_KEY_STRATEGY
    # Name used in cache keys; defaults to the class name
    policy_name: ClassVar[str | None] = None
    rule_aliases: ClassVar[Mapping[str, str]] = {}
    # Rule applied when a requested rule is neither defined nor aliased
    default_rule: ClassVar[str | None] = None

    _rule_names: ClassVar[frozenset[str]] = frozenset()

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        base = set(dir(Policy))
        cls._rule_names = frozenset(
            name
            for name in dir(cls)
            if not name.startswith("_")
            and name not in base
            and inspect.isfunction(getattr(cls, name))
        )

    def __init__(
        self,
        record: Any = None,
        *,
        evaluator: RuleEvaluator | None = None,
        **context: Any,
    ) -> None:
        """Bind record and authorization context.

        Args:
            record: Object being authorized (may be None or a class).
            evaluator: Rule evaluator; defaults to the full caching pipeline.
            **context: Authorization context; every name in ``authorize`` is required.

        Raises:
            MissingContextError: A declared context entry was not supplied.
        """
        for name in self.authorize:
            if name not in context:
                raise MissingContextError(self.type_name(), name)
        self.record = record
        self.context: dict[str, Any] = {name: context[name] for name in self.authorize}
        self.rule_memo = RuleMemo()
        self._evaluator = evaluator or build_rule_evaluator()

    def __getattr__(self, name: str) -> Any:
        context = self.__dict__.get("context")
        if context is not None and name in context:
            return context[name]
        raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")

    @classmethod
    def type_name(cls) -> str:
        return cls.policy_name or cls.__name__

    @classmethod
    def resolve_rule(cls, rule: str) -> str:
        """Map a requested rule to the rule that actually runs.

        Raises:
            UnknownRuleError: Rule is unknown and no default rule is declared.
        """
        if rule in cls._rule_names:
            return rule
        target = cls.rule_aliases.get(rule)
        if target is None and cls.default_rule is not None:
            target = cls.default_rule
        if target is None or target not in cls._rule_names:
            raise UnknownRuleError(cls.type_name(), rule)
        return target

    @property
    def context_objects(self) -> tuple[Any, ...]:
        """Context objects in declared order."""
        return tuple(self.context[name] for name in self.authorize)

    def cache_options(self, rule: str) -> CacheOptions | None:
        """Store options if rule is declared cacheable, else None."""
        return self.cache_rules.get(rule)

    def apply(self, rule: str) -> Any:
        """Evaluate rule through the caching pipeline and return its result."""
        return self._evaluator(self, self.resolve_rule(rule))

    def compute(self, rule: str) -> Any:
        """Run the predicate for rule directly, bypassing every cache."""
        return getattr(self, self.resolve_rule(rule))()

    def __repr__(self) -> str:
        return f"<{self.type_name()} record={self.record!r}>"
