"""BaseEmbedder abstract class defining the embedding provider interface."""

import asyncio
import concurrent.futures
from abc import ABC, abstractmethod
from typing import List

from yanit.exceptions import EmbeddingError


class BaseEmbedder(ABC):
    """Abstract base class for all embedding providers."""

    @property
    @abstractmethod
    def dimension(self) -> int:
        """Return the vector length produced by the model."""
        ...

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Return the model identifier for logging/debugging."""
        ...

    @abstractmethod
    async def aembed(self, text: str) -> List[float]:
        """Embed a single normalized question.

        Args:
            text: Input text. Must be non-empty.

        Returns:
            A list of floats with length == self.dimension.

        Raises:
            EmbeddingError: On empty input or upstream failure.
        """
        ...

    @abstractmethod
    async def aembed_batch(self, texts: List[str]) -> List[List[float]]:
        """Embed several texts; ``result[i]`` corresponds to ``texts[i]``.

        Raises:
            EmbeddingError: If any embedding fails.
        """
        ...

    # --- Helpers for adapters ---

    @staticmethod
    def _require_text(text: str) -> str:
        """Strip *text* and reject empty input before it reaches the provider."""
        if not isinstance(text, str) or not text.strip():
            raise EmbeddingError("Text input cannot be empty")
        return text.strip()

    def _check_dimension(self, vector: List[float]) -> List[float]:
        if len(vector) != self.dimension:
            raise EmbeddingError(
                f"Expected {self.dimension} dimensions from '{self.model_name}', got {len(vector)}"
            )
        return vector

    # --- Sync convenience wrappers ---

    def embed(self, text: str) -> List[float]:
        """Synchronous wrapper for aembed."""
        return self._run_sync(self.aembed(text))

    @staticmethod
    def _run_sync(coro):
        """Run a coroutine to completion from synchronous code.

        Inside an already running loop (Jupyter, etc.) the coroutine runs on
        a fresh loop in a worker thread.
        """
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return asyncio.run(coro)
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()
