"""Content-addressed embedding cache in front of the embedding provider."""

import logging
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from pydantic import ValidationError

from yanit.interfaces.embedder import BaseEmbedder
from yanit.interfaces.kv_store import KeyValueStore
from yanit.logging import preview
from yanit.types import CacheEntry, CacheStats
from yanit.utils.normalization import CACHE_KEY_PREFIX, cache_key
from yanit.utils.tasks import BackgroundTasks

logger = logging.getLogger(__name__)

STATS_KEY = f"{CACHE_KEY_PREFIX}stats"


class EmbeddingCache:
    """Caches embedding vectors in the shared store, keyed by normalized text.

    Store faults never reach the caller: reads fall through to the embedder,
    writes happen in detached tasks, and stats updates are best-effort.
    Stats are a plain read-modify-write of a single record, so concurrent
    requests can lose increments.

    Args:
        embedder: Provider called on cache misses.
        store: Shared store. ``None`` disables caching entirely.
        tasks: Registry for detached writes. A private one is created if omitted.
        ttl_seconds: Lifetime of a cache entry.
        stats_ttl_seconds: Lifetime of the stats record.
    """

    def __init__(
        self,
        embedder: BaseEmbedder,
        store: KeyValueStore | None,
        tasks: BackgroundTasks | None = None,
        ttl_seconds: int = 604800,
        stats_ttl_seconds: int = 2592000,
    ):
        self._embedder = embedder
        self._store = store
        self._tasks = tasks or BackgroundTasks()
        self._ttl = ttl_seconds
        self._stats_ttl = stats_ttl_seconds

    @property
    def enabled(self) -> bool:
        return self._store is not None

    async def get_embedding(self, normalized: str) -> Tuple[List[float], bool]:
        """Return ``(vector, cache_hit)`` for a normalized question.

        Raises:
            EmbeddingError: If the provider fails on a miss.
        """
        if self._store is None:
            logger.debug("Embedding cache disabled, embedding directly")
            return await self._embedder.aembed(normalized), False

        key = cache_key(normalized)
        entry = await self._read(key)
        if entry is not None:
            logger.debug("Embedding cache HIT for: '%s'", preview(normalized))
            await self._record(hit=True)
            return entry.vector, True

        logger.debug("Embedding cache MISS for: '%s'", preview(normalized))
        vector = await self._embedder.aembed(normalized)
        entry = CacheEntry(vector=vector, source_text=normalized)
        self._tasks.spawn(self._write(key, entry), name="cache-write")
        await self._record(hit=False)
        return vector, False

    async def stats(self) -> Optional[CacheStats]:
        """Return the current stats record, or None if absent or unreadable."""
        if self._store is None:
            return None
        try:
            raw = await self._store.get(STATS_KEY)
            return CacheStats.model_validate(raw) if raw else None
        except ValidationError:
            logger.warning("Discarding malformed cache stats record")
            return None
        except Exception as e:
            logger.warning("Error reading cache stats: %s", e)
            return None

    async def size(self) -> int:
        """Number of cached vectors (the stats record is not counted)."""
        if self._store is None:
            return 0
        try:
            keys = await self._store.list(CACHE_KEY_PREFIX)
        except Exception as e:
            logger.warning("Error listing cache entries: %s", e)
            return 0
        return sum(1 for k in keys if k != STATS_KEY)

    async def clear(self) -> int:
        """Delete all cached vectors and the stats record.

        Returns:
            Number of vectors removed. Calling it again returns 0.
        """
        if self._store is None:
            return 0

        cleared = 0
        try:
            for key in await self._store.list(CACHE_KEY_PREFIX):
                if key == STATS_KEY:
                    continue
                if await self._store.delete(key):
                    cleared += 1
            await self._store.delete(STATS_KEY)
            logger.info("Embedding cache cleared: %d entries deleted", cleared)
        except Exception as e:
            logger.warning("Error clearing embedding cache after %d entries: %s", cleared, e)
        return cleared

    # --- Private methods ---

    async def _read(self, key: str) -> Optional[CacheEntry]:
        try:
            raw = await self._store.get(key)
        except Exception as e:
            logger.warning("Cache read error for '%s': %s", preview(key, 40), e)
            return None
        if raw is None:
            return None
        try:
            return CacheEntry.model_validate(raw)
        except ValidationError:
            logger.warning("Discarding malformed cache entry '%s'", preview(key, 40))
            return None

    async def _write(self, key: str, entry: CacheEntry) -> None:
        await self._store.put(key, entry.model_dump(mode="json"), ttl_seconds=self._ttl)

    async def _record(self, hit: bool) -> None:
        try:
            raw = await self._store.get(STATS_KEY)
            stats = CacheStats.model_validate(raw) if raw else CacheStats(
                last_reset=datetime.now(timezone.utc)
            )
            hits = stats.hits + (1 if hit else 0)
            misses = stats.misses + (0 if hit else 1)
            total = stats.total_queries + 1
            updated = CacheStats(
                total_queries=total,
                hits=hits,
                misses=misses,
                hit_rate=hits / total,
                last_reset=stats.last_reset,
            )
            await self._store.put(
                STATS_KEY, updated.model_dump(mode="json"), ttl_seconds=self._stats_ttl
            )
        except Exception as e:
            logger.warning("Error updating cache stats: %s", e)
