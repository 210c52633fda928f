"""Abstract base classes for the external collaborators."""

from yanit.interfaces.analytics import AnalyticsSink
from yanit.interfaces.embedder import BaseEmbedder
from yanit.interfaces.kv_store import KeyValueStore
from yanit.interfaces.vector_index import VectorIndex

__all__ = ["AnalyticsSink", "BaseEmbedder", "KeyValueStore", "VectorIndex"]
