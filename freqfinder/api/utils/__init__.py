"""
Utility functions and classes for the lookup pipeline.
"""

from .cache import CacheStore, FileCacheBackend, NullCacheBackend, SupabaseCacheBackend
from .pool import fan_out, run_concurrently

__all__ = [
    "CacheStore",
    "FileCacheBackend",
    "NullCacheBackend",
    "SupabaseCacheBackend",
    "fan_out",
    "run_concurrently",
]
