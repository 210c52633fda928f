"""AnalyticsSink abstract class for structured event delivery."""

from abc import ABC, abstractmethod
from typing import Any, Dict


class AnalyticsSink(ABC):
    """Fire-and-forget destination for per-query events.

    Implementations must swallow (and log) their own failures: ``track``
    never raises.
    """

    @abstractmethod
    async def track(self, event: str, properties: Dict[str, Any]) -> None:
        """Deliver one event."""
        ...

    async def close(self) -> None:
        """Release resources. No-op by default."""
