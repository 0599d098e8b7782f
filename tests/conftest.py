"""Pytest configuration and fixtures for acp.

Every test starts with fresh settings, no active cache store and no
evaluation scope bound, so process-wide state never leaks between tests.
"""

from collections.abc import Iterator
from dataclasses import dataclass

import pytest

from acp.core.config import get_settings
from acp.infrastructure.cache import MemoryCacheStore, reset_cache_store, set_cache_store
from acp.shared import scope as scope_module


@dataclass
class User:
    """Context object identified by its primary key ("User::<id>")."""

    id: int
    admin: bool = False


@dataclass
class Post:
    """Record whose policy identity embeds its last update (self-invalidating)."""

    id: int
    author_id: int
    published: bool = False
    updated_at: str = "2024-01-01"

    def policy_cache_key(self) -> str:
        return f"Post::{self.id}::{self.updated_at}"


@pytest.fixture(autouse=True)
def isolated_state(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Reset settings cache, store registry and scope binding around each test."""
    for name in ("ACP_CACHE_NAMESPACE", "ACP_CACHE_STORE_BACKEND", "ACP_CACHE_DEFAULT_TTL"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    reset_cache_store()
    token = scope_module._current_scope.set(None)
    yield
    scope_module._current_scope.reset(token)
    reset_cache_store()
    get_settings.cache_clear()


@pytest.fixture
def memory_store() -> MemoryCacheStore:
    """In-memory store installed as the process-wide cache store."""
    store = MemoryCacheStore()
    set_cache_store(store)
    return store


@pytest.fixture
def make_user() -> type[User]:
    return User


@pytest.fixture
def make_post() -> type[Post]:
    return Post


@pytest.fixture
def user() -> User:
    return User(id=7)


@pytest.fixture
def admin() -> User:
    return User(id=1, admin=True)


@pytest.fixture
def post() -> Post:
    return Post(id=42, author_id=7)
