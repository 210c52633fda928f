"""Registry for fire-and-forget coroutines (cache writes, metrics, analytics)."""

import asyncio
import logging
from typing import Awaitable, Set

logger = logging.getLogger(__name__)


class BackgroundTasks:
    """Keeps detached tasks alive and logs their failures.

    ``asyncio`` only holds weak references to running tasks, so a detached
    task needs a strong reference until it finishes. Exceptions raised by a
    task are logged and never re-raised into the request that spawned it.
    """

    def __init__(self) -> None:
        self._tasks: Set[asyncio.Task] = set()

    def __len__(self) -> int:
        return len(self._tasks)

    def spawn(self, coro: Awaitable, name: str = "background") -> asyncio.Task:
        """Schedule *coro* on the running loop without awaiting it."""
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(lambda t: self._on_done(t, name))
        return task

    def _on_done(self, task: asyncio.Task, name: str) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.debug("Background task '%s' cancelled", name)
            return
        exc = task.exception()
        if exc is not None:
            logger.warning(
                "Background task '%s' failed: %s",
                name,
                exc,
                exc_info=(type(exc), exc, exc.__traceback__),
            )

    async def drain(self) -> None:
        """Wait for every pending task. Failures are logged, not raised."""
        while self._tasks:
            pending = list(self._tasks)
            await asyncio.gather(*pending, return_exceptions=True)
            # Let done-callbacks run so the set shrinks
            await asyncio.sleep(0)
