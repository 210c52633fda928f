"""OpenAI embeddings adapter implementing the BaseEmbedder interface."""

import logging
from typing import Any, Dict, List

try:
    from openai import APIConnectionError, AsyncOpenAI, AuthenticationError, RateLimitError
except ImportError:
    raise ImportError(
        "OpenAI is required for OpenAIAdapter. "
        "Install it with: pip install yanit[openai]"
    )

from yanit.exceptions import EmbeddingError
from yanit.interfaces.embedder import BaseEmbedder

logger = logging.getLogger(__name__)


class OpenAIAdapter(BaseEmbedder):
    """Embedding adapter using the OpenAI Embeddings API.

    The ``text-embedding-3-*`` models are multilingual and handle Turkish.

    Args:
        model_name: OpenAI model identifier.
        api_key: OpenAI API key. If None, reads from OPENAI_API_KEY env var.
        dimensions: Optional dimension override (for models that support it).
    """

    _KNOWN_DIMENSIONS = {
        "text-embedding-3-small": 1536,
        "text-embedding-3-large": 3072,
        "text-embedding-ada-002": 1536,
    }

    def __init__(
        self,
        model_name: str = "text-embedding-3-small",
        api_key: str | None = None,
        dimensions: int | None = None,
    ):
        self._model_name = model_name
        self._dimensions = dimensions
        try:
            self._client = AsyncOpenAI(api_key=api_key)
        except Exception as e:
            raise EmbeddingError(f"Failed to initialize OpenAI client: {e}") from e
        logger.info("OpenAI client initialized for model '%s'", model_name)

    @property
    def dimension(self) -> int:
        if self._dimensions:
            return self._dimensions
        dim = self._KNOWN_DIMENSIONS.get(self._model_name)
        if dim is None:
            raise EmbeddingError(
                f"Unknown dimension for model '{self._model_name}'. Pass 'dimensions' explicitly."
            )
        return dim

    @property
    def model_name(self) -> str:
        return self._model_name

    async def aembed(self, text: str) -> List[float]:
        vectors = await self._create([self._require_text(text)])
        return self._check_dimension(vectors[0])

    async def aembed_batch(self, texts: List[str]) -> List[List[float]]:
        cleaned = [self._require_text(t) for t in texts]
        if not cleaned:
            return []
        return [self._check_dimension(v) for v in await self._create(cleaned)]

    async def _create(self, inputs: List[str]) -> List[List[float]]:
        kwargs: Dict[str, Any] = {"input": inputs, "model": self._model_name}
        if self._dimensions is not None:
            kwargs["dimensions"] = self._dimensions
        try:
            response = await self._client.embeddings.create(**kwargs)
        except AuthenticationError as e:
            logger.error("OpenAI authentication failed: %s", e)
            raise EmbeddingError(f"OpenAI authentication failed: {e}") from e
        except RateLimitError as e:
            logger.warning("OpenAI rate limit exceeded: %s", e)
            raise EmbeddingError(f"OpenAI rate limit exceeded: {e}") from e
        except APIConnectionError as e:
            logger.error("OpenAI API connection error: %s", e)
            raise EmbeddingError(f"OpenAI API connection error: {e}") from e
        except Exception as e:
            raise EmbeddingError(
                f"Failed to embed with OpenAI model '{self._model_name}': {e}"
            ) from e

        if len(response.data) != len(inputs):
            raise EmbeddingError(
                f"OpenAI returned {len(response.data)} embeddings for {len(inputs)} inputs"
            )
        return [item.embedding for item in sorted(response.data, key=lambda x: x.index)]
