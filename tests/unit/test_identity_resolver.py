"""Tests for IdentityKeyResolver (capability order and failure)."""

import pytest

from acp.application.services.identity_resolver import CacheIdentity, IdentityKeyResolver
from acp.domain.exceptions import ConfigurationError, MissingIdentityError


class _Everything:
    id = 3

    def policy_cache_key(self) -> str:
        return "policy-key"

    def cache_key(self) -> str:
        return "generic-key"


class _CacheKeyOnly:
    id = 3

    def cache_key(self) -> str:
        return "articles/3-20240101"


class _VersionedCollection:
    version = "v7"

    @classmethod
    def policy_cache_key(cls) -> str:
        return f"posts::{cls.version}"


class _CachedCollection:
    @staticmethod
    def cache_key() -> str:
        return "articles/index"


class _Handle:
    def __init__(self, id: object) -> None:
        self.id = id


@pytest.fixture
def resolver() -> IdentityKeyResolver:
    return IdentityKeyResolver()


class TestResolutionOrder:
    """First applicable capability wins."""

    def test_policy_cache_key_used_verbatim(self, resolver: IdentityKeyResolver) -> None:
        assert resolver.resolve(_Everything()) == "policy-key"

    def test_cache_key_when_no_policy_key(self, resolver: IdentityKeyResolver) -> None:
        assert resolver.resolve(_CacheKeyOnly()) == "articles/3-20240101"

    def test_stable_handle_uses_type_name(self, resolver: IdentityKeyResolver, user) -> None:
        assert resolver.resolve(user) == "User::7"
        assert resolver.resolve(_Handle("abc")) == "_Handle::abc"

    def test_record_policy_key_reflects_state(self, resolver: IdentityKeyResolver, post) -> None:
        before = resolver.resolve(post)
        post.updated_at = "2024-02-01"
        assert before == "Post::42::2024-01-01"
        assert resolver.resolve(post) == "Post::42::2024-02-01"

    def test_explicit_wrapper(self, resolver: IdentityKeyResolver) -> None:
        assert resolver.resolve(CacheIdentity("user::7::admin")) == "user::7::admin"

    def test_class_resolves_to_qualified_name(self, resolver: IdentityKeyResolver) -> None:
        assert resolver.resolve(_Handle) == f"{__name__}._Handle"

    def test_class_policy_cache_key_used_verbatim(
        self, resolver: IdentityKeyResolver, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        assert resolver.resolve(_VersionedCollection) == "posts::v7"
        monkeypatch.setattr(_VersionedCollection, "version", "v8")
        assert resolver.resolve(_VersionedCollection) == "posts::v8"

    def test_class_cache_key_used(self, resolver: IdentityKeyResolver) -> None:
        assert resolver.resolve(_CachedCollection) == "articles/index"

    def test_instance_level_key_does_not_identify_the_class(self, resolver: IdentityKeyResolver, post) -> None:
        post_type = type(post)
        assert resolver.resolve(post_type) == f"{post_type.__module__}.{post_type.__qualname__}"
        assert resolver.resolve(_Everything) == f"{__name__}._Everything"


class TestNoIdentity:
    """Objects without a capability raise unless a process-local handle is allowed."""

    def test_plain_object_raises_configuration_error(self, resolver: IdentityKeyResolver) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            resolver.resolve(object())
        assert isinstance(exc_info.value, MissingIdentityError)
        assert exc_info.value.error_code == "CONFIGURATION_ERROR"
        assert exc_info.value.details == {"type": "object"}

    def test_none_handle_is_not_an_identity(self, resolver: IdentityKeyResolver) -> None:
        with pytest.raises(MissingIdentityError):
            resolver.resolve(_Handle(None))

    def test_scalars_need_a_wrapper(self, resolver: IdentityKeyResolver) -> None:
        with pytest.raises(MissingIdentityError):
            resolver.resolve("user-7")

    def test_in_process_fallback(self, resolver: IdentityKeyResolver) -> None:
        obj = object()
        identity = resolver.resolve(obj, in_process=True)
        assert identity == f"object::@{id(obj)}"
        assert resolver.resolve(obj, in_process=True) == identity

    def test_in_process_does_not_override_capabilities(self, resolver: IdentityKeyResolver, user) -> None:
        assert resolver.resolve(user, in_process=True) == "User::7"


def test_resolve_all_preserves_order(resolver: IdentityKeyResolver, user, admin) -> None:
    assert resolver.resolve_all([admin, user]) == ("User::1", "User::7")
    assert resolver.resolve_all([user, admin]) == ("User::7", "User::1")
