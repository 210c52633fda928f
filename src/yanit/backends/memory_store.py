"""In-process KeyValueStore with passive TTL expiry."""

import json
import logging
import time
from typing import Any, Callable, Dict, List, Optional, Tuple

from yanit.interfaces.kv_store import KeyValueStore

logger = logging.getLogger(__name__)


class MemoryStore(KeyValueStore):
    """Dict-backed store for single-process deployments and tests.

    Values are kept JSON-encoded so callers never share mutable state with
    the store, mirroring a networked backend. Expired keys are dropped lazily
    on access; there is no sweeper.

    Args:
        clock: Returns the current time in seconds. Injected by tests.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._data: Dict[str, Tuple[str, Optional[float]]] = {}

    def __len__(self) -> int:
        return len(self._live_keys())

    async def get(self, key: str) -> Optional[Any]:
        item = self._data.get(key)
        if item is None:
            return None
        raw, expires_at = item
        if expires_at is not None and self._clock() >= expires_at:
            del self._data[key]
            return None
        return json.loads(raw)

    async def put(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        expires_at = self._clock() + ttl_seconds if ttl_seconds else None
        self._data[key] = (json.dumps(value, ensure_ascii=False), expires_at)

    async def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    async def list(self, prefix: str) -> List[str]:
        return sorted(k for k in self._live_keys() if k.startswith(prefix))

    async def close(self) -> None:
        self._data.clear()
        logger.debug("Memory store cleared")

    def _live_keys(self) -> List[str]:
        now = self._clock()
        expired = [k for k, (_, exp) in self._data.items() if exp is not None and now >= exp]
        for k in expired:
            del self._data[k]
        return list(self._data)
