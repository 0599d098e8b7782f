"""Exceptions for the acp caching layer.

Three kinds of failure leave this layer: configuration problems
(ConfigurationError), backing store failures (StoreError) and the rule's
own exceptions, which are re-raised unchanged and never wrapped. None of
them is ever turned into an allow or deny decision; a denial is its own
exception (AccessDeniedException) so hosts can tell the two apart.
"""

from typing import Any


class AcpException(Exception):
    """Base exception for all acp errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. key, policy, rule).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(AcpException):
    """Raised when the layer is used without the setup it needs."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, "CONFIGURATION_ERROR", details)


class MissingIdentityError(ConfigurationError):
    """Object exposes no capability a cache identity can be derived from."""

    def __init__(self, obj: object) -> None:
        super().__init__(
            f"Object has no derivable cache identity: {type(obj).__name__}",
            {"type": type(obj).__name__},
        )


class MissingContextError(ConfigurationError):
    """Policy declares an authorization context entry the caller did not supply."""

    def __init__(self, policy: str, name: str) -> None:
        super().__init__(
            f"Missing authorization context {name!r} for {policy}",
            {"policy": policy, "context": name},
        )


class UnknownRuleError(ConfigurationError):
    """Rule is not defined on the policy and no default rule is declared."""

    def __init__(self, policy: str, rule: str) -> None:
        super().__init__(
            f"Rule {rule!r} is not defined on {policy}",
            {"policy": policy, "rule": rule},
        )


class CacheStoreNotConfiguredError(ConfigurationError):
    """A cacheable rule was evaluated but no backing store is set."""

    def __init__(self, policy: str | None = None, rule: str | None = None) -> None:
        details = {}
        if policy:
            details["policy"] = policy
        if rule:
            details["rule"] = rule
        super().__init__(
            "No cache store configured; call set_cache_store() or set "
            "ACP_CACHE_STORE_BACKEND before evaluating cacheable rules",
            details,
        )


class StoreError(AcpException):
    """Backing store failed to read, write or delete."""

    def __init__(
        self,
        operation: str,
        reason: str,
        key: str | None = None,
        pattern: str | None = None,
    ) -> None:
        details: dict[str, Any] = {"operation": operation, "reason": reason}
        if key is not None:
            details["key"] = key
        if pattern is not None:
            details["pattern"] = pattern
        super().__init__(f"Cache store {operation} failed: {reason}", "STORE_ERROR", details)


class PatternDeletionUnsupportedError(StoreError):
    """Store cannot delete keys by pattern."""

    def __init__(self, store: str, pattern: str) -> None:
        super().__init__(
            "delete_matched",
            f"{store} does not support pattern deletion",
            pattern=pattern,
        )


class AccessDeniedException(AcpException):
    """Rule evaluated to a falsy result."""

    def __init__(self, policy: str, rule: str, message: str = "Access denied") -> None:
        super().__init__(message, "ACCESS_DENIED", {"policy": policy, "rule": rule})
        self.policy = policy
        self.rule = rule
