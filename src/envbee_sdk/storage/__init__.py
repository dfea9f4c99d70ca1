"""
Local fallback cache.

Stores the last raw payload fetched for each variable, partitioned by
API key, so values can still be served when the service is unreachable.

Usage:
    from envbee_sdk.storage import CacheStore, namespace_for

    store = CacheStore.open(namespace_for(api_key))
    store.set("DB_HOST", payload)
    cached = store.get("DB_HOST")
"""

from envbee_sdk.storage.cache_store import (
    DEFAULT_CACHE_DIR,
    CacheStore,
    namespace_for,
)

__all__ = [
    "CacheStore",
    "namespace_for",
    "DEFAULT_CACHE_DIR",
]
