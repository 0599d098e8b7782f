"""Core: configuration and shared constants.

Single place for settings and cache key literals.
"""

from acp.core.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
