"""Configuration (settings and environment).

Single source of truth for cache configuration. Uses pydantic-settings
with .env support; every field can be set through an ACP_-prefixed
environment variable (e.g. ACP_CACHE_STORE_BACKEND=redis).
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from acp.core.constants import CACHE_BACKEND_NONE, CACHE_BACKENDS


class Settings(BaseSettings):
    """Settings loaded from environment and .env.

    All settings have defaults; validate_backend_and_ttl rejects unknown
    store backends and non-positive TTLs at load time.
    """

    debug: bool = False

    # Key namespace: None = "acp:<major>.<minor>" from the package version.
    # Changing it makes every previously written key unreachable.
    cache_namespace: str | None = None

    # Backing store selected at startup: "none", "memory" or "redis"
    cache_store_backend: str = CACHE_BACKEND_NONE
    # Expiry (seconds) for cacheable rules declared without expires_in; None = no expiry
    cache_default_ttl: int | None = 3600

    # Redis store
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: SecretStr | None = None
    redis_socket_timeout: float = 5.0

    # Memoization toggles for scopes opened by an integrated host (middleware).
    # Scopes bound implicitly in a bare host always start with both off.
    instance_memoization: bool = True
    scope_memoization: bool = True

    # OpenTelemetry spans around external cache calls (API only; host configures SDK)
    telemetry_enabled: bool = True

    model_config = SettingsConfigDict(
        env_prefix="ACP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_backend_and_ttl(self) -> "Settings":
        """Validate store backend name and default TTL."""
        backend = self.cache_store_backend.lower()
        if backend not in CACHE_BACKENDS:
            raise ValueError(
                f"cache_store_backend must be one of {', '.join(CACHE_BACKENDS)}, "
                f"got: {self.cache_store_backend!r}"
            )
        self.cache_store_backend = backend
        if self.cache_default_ttl is not None and self.cache_default_ttl <= 0:
            raise ValueError(
                "cache_default_ttl must be a positive number of seconds or unset. "
                "Set ACP_CACHE_DEFAULT_TTL or leave it empty for no expiry."
            )
        if self.cache_namespace is not None and not self.cache_namespace.strip():
            raise ValueError("cache_namespace must not be blank when set")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() after overriding env vars so the next
    get_settings() picks up the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
