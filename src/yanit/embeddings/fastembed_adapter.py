"""FastEmbed adapter implementing the BaseEmbedder interface."""

import asyncio
import logging
from typing import List

try:
    from fastembed import TextEmbedding
    from fastembed.common.model_description import ModelSource, PoolingType
except ImportError:
    raise ImportError(
        "FastEmbed is required for FastEmbedAdapter. "
        "Install it with: pip install yanit[fastembed]"
    )

from yanit.exceptions import EmbeddingError
from yanit.interfaces.embedder import BaseEmbedder

logger = logging.getLogger(__name__)


class FastEmbedAdapter(BaseEmbedder):
    """Local ONNX embeddings via FastEmbed.

    The default model is multilingual so Turkish questions and FAQ texts
    land in the same space. Models outside the fastembed registry are
    registered as custom HuggingFace ONNX exports.

    Args:
        model_name: Model identifier.
        max_length: Maximum token length.
        cache_dir: Optional directory for model cache.

    Raises:
        EmbeddingError: If the model cannot be loaded.
    """

    def __init__(
        self,
        model_name: str = "sentence-transformers/paraphrase-multilingual-MiniLM-L12-v2",
        max_length: int = 512,
        cache_dir: str | None = None,
    ):
        self._model_name = model_name
        self._dimension: int | None = None
        self._model: TextEmbedding | None = None

        self._load_model(model_name, max_length, cache_dir)

    @property
    def dimension(self) -> int:
        assert self._dimension is not None
        return self._dimension

    @property
    def model_name(self) -> str:
        return self._model_name

    async def aembed(self, text: str) -> List[float]:
        """Embed one text in a worker thread (fastembed is synchronous)."""
        text = self._require_text(text)
        try:
            vectors = await asyncio.to_thread(self._embed_sync, [text])
        except Exception as e:
            raise EmbeddingError(
                f"Failed to embed text with model '{self._model_name}': {e}"
            ) from e
        return self._check_dimension(vectors[0])

    async def aembed_batch(self, texts: List[str]) -> List[List[float]]:
        cleaned = [self._require_text(t) for t in texts]
        if not cleaned:
            return []
        try:
            vectors = await asyncio.to_thread(self._embed_sync, cleaned)
        except Exception as e:
            raise EmbeddingError(
                f"Failed to embed batch with model '{self._model_name}': {e}"
            ) from e
        return [self._check_dimension(v) for v in vectors]

    def _embed_sync(self, texts: List[str]) -> List[List[float]]:
        assert self._model is not None
        return [
            vec.tolist() if hasattr(vec, "tolist") else list(vec)
            for vec in self._model.embed(texts)
        ]

    def _load_model(self, model_name: str, max_length: int, cache_dir: str | None) -> None:
        """Load a registered model or register a custom one, then probe its dimension."""
        try:
            supported_models = [m["model"] for m in TextEmbedding.list_supported_models()]

            if model_name not in supported_models:
                logger.info("Registering custom model: %s", model_name)
                TextEmbedding.add_custom_model(
                    model=model_name,
                    pooling=PoolingType.MEAN,
                    normalization=True,
                    sources=ModelSource(hf=model_name),
                    model_file="onnx/model.onnx",
                )

            self._model = TextEmbedding(
                model_name=model_name,
                max_length=max_length,
                cache_dir=cache_dir,
            )
            probe = self._embed_sync(["boyut testi"])
            self._dimension = len(probe[0])
            logger.info("Model '%s' loaded, dimension=%d", model_name, self._dimension)
        except Exception as e:
            raise EmbeddingError(f"Failed to load embedding model '{model_name}': {e}") from e
