"""Redis-backed KeyValueStore using native key expiry."""

import json
import logging
import re
from typing import Any, List, Optional

import redis
from redis import asyncio as aioredis

from yanit.config import Settings
from yanit.exceptions import StoreUnavailableError
from yanit.interfaces.kv_store import KeyValueStore

logger = logging.getLogger(__name__)

_GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")


class RedisStore(KeyValueStore):
    """Shared store on Redis. TTLs map to ``SET ... EX``.

    Args:
        settings: Yanıt Settings instance. If None, loads from environment.
        client: Pre-built async Redis client (takes precedence over settings).
    """

    def __init__(
        self,
        settings: Settings | None = None,
        client: aioredis.Redis | None = None,
    ):
        self._settings = settings or Settings()
        self._client = client or aioredis.Redis.from_url(
            self._settings.redis_url,
            decode_responses=True,
        )

    @property
    def client(self) -> aioredis.Redis:
        return self._client

    async def ping(self) -> bool:
        """Return True if Redis answers, False otherwise."""
        try:
            return bool(await self._client.ping())
        except (redis.RedisError, OSError) as e:
            logger.warning("Redis ping failed: %s", e)
            return False

    async def get(self, key: str) -> Optional[Any]:
        try:
            raw = await self._client.get(key)
        except (redis.RedisError, OSError) as e:
            raise StoreUnavailableError(f"Redis GET failed for '{key}': {e}") from e
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Discarding non-JSON value under '%s'", key)
            return None

    async def put(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        try:
            await self._client.set(
                key,
                json.dumps(value, ensure_ascii=False),
                ex=ttl_seconds or None,
            )
        except (redis.RedisError, OSError) as e:
            raise StoreUnavailableError(f"Redis SET failed for '{key}': {e}") from e

    async def delete(self, key: str) -> bool:
        try:
            return bool(await self._client.delete(key))
        except (redis.RedisError, OSError) as e:
            raise StoreUnavailableError(f"Redis DEL failed for '{key}': {e}") from e

    async def list(self, prefix: str) -> List[str]:
        pattern = _GLOB_SPECIAL.sub(r"\\\1", prefix) + "*"
        try:
            return sorted([key async for key in self._client.scan_iter(match=pattern)])
        except (redis.RedisError, OSError) as e:
            raise StoreUnavailableError(f"Redis SCAN failed for '{prefix}*': {e}") from e

    async def close(self) -> None:
        await self._client.aclose()
        logger.info("Redis client closed")
