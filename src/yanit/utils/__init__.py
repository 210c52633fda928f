"""Utility functions for text normalization and background work."""

from yanit.utils.normalization import (
    TypoCorrector,
    cache_key,
    has_turkish_characters,
    normalize_question,
    question_hash,
    text_similarity,
    text_variations,
)
from yanit.utils.tasks import BackgroundTasks

__all__ = [
    "BackgroundTasks",
    "TypoCorrector",
    "cache_key",
    "has_turkish_characters",
    "normalize_question",
    "question_hash",
    "text_similarity",
    "text_variations",
]
