"""Concrete store and index backends.

Redis and Qdrant are imported lazily so that a memory-only deployment does
not need either client library at import time.
"""

from typing import Optional

from yanit.backends.memory_store import MemoryStore
from yanit.config import Settings
from yanit.interfaces.kv_store import KeyValueStore


def build_store(settings: Settings) -> Optional[KeyValueStore]:
    """Create the shared store selected by ``settings.store_backend``.

    Returns ``None`` for ``"none"``; every store-dependent feature then
    degrades (cache bypassed, rate limiter open, metrics dropped).
    """
    if settings.store_backend == "memory":
        return MemoryStore()
    if settings.store_backend == "redis":
        from yanit.backends.redis_store import RedisStore

        return RedisStore(settings)
    return None


def get_qdrant_index():
    """Import and return the QdrantIndex class."""
    from yanit.backends.qdrant import QdrantIndex

    return QdrantIndex


__all__ = ["MemoryStore", "build_store", "get_qdrant_index"]
