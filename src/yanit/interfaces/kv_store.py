"""KeyValueStore abstract class for the shared TTL store."""

from abc import ABC, abstractmethod
from typing import Any, List, Optional


class KeyValueStore(ABC):
    """Shared key-value store holding cache entries, rate-limit windows and metrics.

    Values are JSON-compatible objects. There are no cross-key transactions:
    callers doing read-modify-write accept lost updates under concurrency.
    Every method raises :class:`~yanit.exceptions.StoreUnavailableError` when
    the store cannot be reached.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """Return the stored value, or ``None`` if missing or expired."""
        ...

    @abstractmethod
    async def put(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        """Store *value* under *key*, replacing any previous value.

        Args:
            key: Store key.
            value: JSON-compatible value, written as a whole.
            ttl_seconds: Expiry in seconds; ``None`` keeps the value forever.
        """
        ...

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete *key*. Returns ``True`` if something was removed."""
        ...

    @abstractmethod
    async def list(self, prefix: str) -> List[str]:
        """Return all live keys starting with *prefix*."""
        ...

    async def close(self) -> None:
        """Release resources. No-op by default."""

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
        return False
