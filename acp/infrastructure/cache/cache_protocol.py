"""Cache store protocol for the external tier (DIP)."""

from collections.abc import Callable
from typing import Any, Protocol


class CacheStoreProtocol(Protocol):
    """Protocol for backing stores (e.g. Redis, in-process memory).

    Implementations must be safe to call from many threads or processes
    without outside locking. Concurrent misses on one key may each run
    compute_fn; the last write wins.
    """

    supports_pattern_deletion: bool

    def fetch(
        self,
        key: str,
        compute_fn: Callable[[], Any],
        *,
        expires_in: int | None = None,
        **options: Any,
    ) -> Any:
        """Return the stored value, or compute, store and return it.

        Nothing is stored when compute_fn raises; its exception propagates.
        Store failures raise StoreError.
        """
        ...

    def delete_matched(self, pattern: str) -> int:
        """Delete keys matching a glob-style pattern; return how many were deleted.

        Stores that cannot do this set supports_pattern_deletion = False.
        """
        ...
