"""Fixed-window per-client rate limiter backed by the shared store."""

import logging
import math
import time
from typing import Callable

from pydantic import ValidationError

from yanit.interfaces.kv_store import KeyValueStore
from yanit.types import RateLimitDecision, RateLimitWindow

logger = logging.getLogger(__name__)

RATE_LIMIT_PREFIX = "ratelimit:"

_ALLOW = RateLimitDecision(allowed=True)


class RateLimiter:
    """Admits at most ``limit`` requests per client in each fixed window.

    The counter resets abruptly at the window boundary, so up to twice the
    limit can pass across two adjacent windows. Increments are a plain
    read-then-write and may be lost under concurrency. Store faults fail
    open.

    Args:
        store: Shared store. ``None`` admits everything.
        limit: Requests allowed per window.
        window_seconds: Window length.
        clock: Returns the current Unix time in seconds.
    """

    def __init__(
        self,
        store: KeyValueStore | None,
        limit: int = 60,
        window_seconds: int = 60,
        clock: Callable[[], float] = time.time,
    ):
        if limit < 1 or window_seconds < 1:
            raise ValueError("limit and window_seconds must be positive")
        self._store = store
        self._limit = limit
        self._window = window_seconds
        self._clock = clock

    @property
    def limit(self) -> int:
        return self._limit

    async def admit(self, client_key: str) -> RateLimitDecision:
        """Count one request for *client_key* and decide whether it may proceed."""
        if self._store is None:
            return _ALLOW

        key = f"{RATE_LIMIT_PREFIX}{client_key}"
        try:
            return await self._admit(key)
        except Exception as e:
            logger.warning("Rate limiter store error for '%s', failing open: %s", client_key, e)
            return _ALLOW

    async def _admit(self, key: str) -> RateLimitDecision:
        now = self._clock()
        window = await self._load(key)

        if window is None or now >= window.window_start + self._window:
            fresh = RateLimitWindow(window_start=now, count=1)
            await self._store.put(key, fresh.model_dump(), ttl_seconds=self._window)
            return _ALLOW

        remaining = window.window_start + self._window - now
        if window.count >= self._limit:
            retry_after = max(1, math.ceil(remaining))
            logger.info("Rate limit exceeded for '%s', retry in %ds", key, retry_after)
            return RateLimitDecision(allowed=False, retry_after_seconds=retry_after)

        bumped = RateLimitWindow(window_start=window.window_start, count=window.count + 1)
        await self._store.put(key, bumped.model_dump(), ttl_seconds=max(1, math.ceil(remaining)))
        return _ALLOW

    async def _load(self, key: str) -> RateLimitWindow | None:
        raw = await self._store.get(key)
        if raw is None:
            return None
        try:
            return RateLimitWindow.model_validate(raw)
        except ValidationError:
            logger.warning("Discarding malformed rate-limit window '%s'", key)
            return None
