"""Delete cached rule results matching a key pattern from the configured store.

Usage:
    python -m scripts.invalidate_policy_cache <pattern>
    python -m scripts.invalidate_policy_cache "acp:1.0/posts/Post::42/*"
Requires ACP_CACHE_STORE_BACKEND=redis (an in-memory store lives only
inside its own process, so there is nothing to delete from here).
"""

import sys

from acp.core.config import get_settings
from acp.core.constants import CACHE_BACKEND_REDIS
from acp.domain.exceptions import StoreError
from acp.infrastructure.cache import ExternalCacheAdapter, build_cache_store
from acp.shared.telemetry import setup_logging


def main() -> None:
    """Run delete_matched for the pattern given on the command line."""
    if len(sys.argv) != 2:
        print(__doc__, file=sys.stderr)
        sys.exit(2)
    pattern = sys.argv[1]
    setup_logging()

    settings = get_settings()
    if settings.cache_store_backend != CACHE_BACKEND_REDIS:
        print(
            f"Set ACP_CACHE_STORE_BACKEND=redis (current: {settings.cache_store_backend})",
            file=sys.stderr,
        )
        sys.exit(1)

    store = build_cache_store(settings)
    try:
        deleted = ExternalCacheAdapter(store).delete_matched(pattern)
    except StoreError as e:
        print(f"Invalidation failed: {e.message} ({e.details})", file=sys.stderr)
        sys.exit(1)
    print(f"Done. Deleted {deleted} key(s) matching {pattern}")


if __name__ == "__main__":
    main()
