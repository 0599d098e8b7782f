"""Domain layer: exceptions and policy declaration value objects.

No dependencies on infrastructure. Used by application and
infrastructure layers.
"""

from acp.domain.exceptions import (
    AccessDeniedException,
    AcpException,
    CacheStoreNotConfiguredError,
    ConfigurationError,
    MissingContextError,
    MissingIdentityError,
    PatternDeletionUnsupportedError,
    StoreError,
    UnknownRuleError,
)
from acp.domain.policy import DEFAULT_KEY_STRATEGY, CacheOptions, KeyParts, KeyStrategy

__all__ = [
    # Exceptions
    "AccessDeniedException",
    "AcpException",
    "CacheStoreNotConfiguredError",
    "ConfigurationError",
    "MissingContextError",
    "MissingIdentityError",
    "PatternDeletionUnsupportedError",
    "StoreError",
    "UnknownRuleError",
    # Policy declarations
    "DEFAULT_KEY_STRATEGY",
    "CacheOptions",
    "KeyParts",
    "KeyStrategy",
]
