"""Embedder adapter implementations (FastEmbed, OpenAI).

Lazy imports to avoid pulling in optional dependencies at package level.
"""

from yanit.config import Settings
from yanit.interfaces.embedder import BaseEmbedder


def get_fastembed_adapter():
    """Import and return the FastEmbedAdapter class."""
    from yanit.embeddings.fastembed_adapter import FastEmbedAdapter

    return FastEmbedAdapter


def get_openai_adapter():
    """Import and return the OpenAIAdapter class."""
    from yanit.embeddings.openai_adapter import OpenAIAdapter

    return OpenAIAdapter


def build_embedder(settings: Settings) -> BaseEmbedder:
    """Instantiate the adapter selected by ``settings.embedding_provider``."""
    if settings.embedding_provider == "openai":
        return get_openai_adapter()(
            model_name=settings.embedding_model,
            dimensions=settings.embedding_dimensions,
        )
    return get_fastembed_adapter()(model_name=settings.embedding_model)


__all__ = ["build_embedder", "get_fastembed_adapter", "get_openai_adapter"]
