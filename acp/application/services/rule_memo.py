"""Per-policy-instance memo of rule results."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)


class RuleMemo:
    """Rule name -> result, owned by exactly one policy instance.

    Only successful results are kept: a rule that raised is recomputed on
    the next call. Entries go away with the owning policy instance.
    """

    def __init__(self) -> None:
        self._results: dict[str, Any] = {}

    def apply_once(self, rule_name: str, compute_fn: Callable[[], Any]) -> Any:
        """Return the stored result for rule_name, computing it on first use."""
        if rule_name in self._results:
            logger.debug("Rule memo HIT: %s", rule_name)
            return self._results[rule_name]
        result = compute_fn()
        self._results[rule_name] = result
        return result

    def __contains__(self, rule_name: object) -> bool:
        return rule_name in self._results

    def __len__(self) -> int:
        return len(self._results)
