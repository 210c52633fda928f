"""Yanıt - semantic FAQ answering for Turkish questions."""

__version__ = "0.1.0"

from yanit.config import Settings
from yanit.core import FAQBot
from yanit.interfaces.analytics import AnalyticsSink
from yanit.interfaces.embedder import BaseEmbedder
from yanit.interfaces.kv_store import KeyValueStore
from yanit.interfaces.vector_index import VectorIndex
from yanit.logging import setup_logging
from yanit.types import FAQ, DirectAnswer, FuzzyAnswer, MatchCandidate, NoMatchAnswer
from yanit.utils.normalization import normalize_question

__all__ = [
    "FAQBot", "Settings", "FAQ", "MatchCandidate", "DirectAnswer", "FuzzyAnswer",
    "NoMatchAnswer", "BaseEmbedder", "VectorIndex", "KeyValueStore", "AnalyticsSink",
    "normalize_question", "setup_logging",
]
