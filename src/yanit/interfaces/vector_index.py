"""VectorIndex abstract class defining the similarity search interface."""

from abc import ABC, abstractmethod
from typing import List, Sequence, Tuple

from yanit.types import FAQ, MatchCandidate


class VectorIndex(ABC):
    """Abstract base class for FAQ vector indexes.

    ``sorted_results`` declares whether :meth:`query` guarantees descending
    score order. The matcher sorts results itself for indexes that set it to
    ``False``.
    """

    sorted_results: bool = True

    @abstractmethod
    async def initialize(self, dimension: int, **kwargs) -> None:
        """Create the collection if needed. Idempotent.

        Raises:
            IndexInitializationError: If setup fails.
        """
        ...

    @abstractmethod
    async def upsert(self, items: Sequence[Tuple[FAQ, List[float]]]) -> None:
        """Insert or replace FAQs together with their question vectors.

        Raises:
            VectorIndexError: If the upsert fails.
        """
        ...

    @abstractmethod
    async def query(self, vector: List[float], top_k: int = 3) -> List[MatchCandidate]:
        """Return up to *top_k* nearest FAQs, scores in [0, 1].

        Raises:
            VectorIndexError: If the search fails.
        """
        ...

    @abstractmethod
    async def delete_by_ids(self, ids: Sequence[str]) -> None:
        """Remove FAQs by id. Unknown ids are ignored.

        Raises:
            VectorIndexError: If the delete fails.
        """
        ...

    @abstractmethod
    async def count(self) -> int:
        """Return the number of indexed FAQs."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release resources (close connections, etc.)."""
        ...

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
        return False
