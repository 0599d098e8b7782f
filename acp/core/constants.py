"""Core constants: cache key structure and identity literals.

Single source of truth for the external key format. Changing any value
here changes every derived key, so treat it like a namespace bump.
"""

# Product prefix of the default namespace ("acp:<major>.<minor>")
CACHE_PRODUCT_PREFIX = "acp"

# Delimiter between key parts (namespace/contexts/record/policy/rule)
CACHE_KEY_SEP = "/"

# Delimiter inside identities built from a type name and a handle
IDENTITY_SEP = "::"

# Marker for process-local identities (never written to external keys)
PROCESS_HANDLE_MARKER = "@"

# Supported values for Settings.cache_store_backend
CACHE_BACKEND_NONE = "none"
CACHE_BACKEND_MEMORY = "memory"
CACHE_BACKEND_REDIS = "redis"
CACHE_BACKENDS = (CACHE_BACKEND_NONE, CACHE_BACKEND_MEMORY, CACHE_BACKEND_REDIS)

# Batch size for SCAN + UNLINK pattern deletion
DELETE_MATCHED_CHUNK_SIZE = 500
