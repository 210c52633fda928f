"""Tiered decision engine over vector index results."""

import logging
from typing import List

from yanit.interfaces.vector_index import VectorIndex
from yanit.types import Decision, DirectMatch, FuzzyMatch, MatchCandidate, NoMatch

logger = logging.getLogger(__name__)

FUZZY_ALTERNATES = 2
NO_MATCH_SUGGESTIONS = 3


class Matcher:
    """Classifies the nearest FAQs of a question vector into a Decision.

    Tiers (first match wins, comparisons inclusive):
        1. ``best.score >= primary_threshold``  -> DirectMatch
        2. ``best.score >= fuzzy_threshold``    -> FuzzyMatch ("did you mean?")
        3. otherwise                            -> NoMatch with suggestions

    Args:
        index: The vector index to query.
    """

    def __init__(self, index: VectorIndex):
        self._index = index

    async def decide(
        self,
        vector: List[float],
        top_k: int,
        primary_threshold: float,
        fuzzy_threshold: float,
    ) -> Decision:
        """Query the index and classify its best result.

        Raises:
            ValueError: If ``fuzzy_threshold > primary_threshold``.
            VectorIndexError: If the index query fails.
        """
        if fuzzy_threshold > primary_threshold:
            raise ValueError(
                f"fuzzy_threshold ({fuzzy_threshold}) must not exceed "
                f"primary_threshold ({primary_threshold})"
            )

        results = await self._index.query(vector, top_k)
        if not self._index.sorted_results:
            results = sorted(results, key=lambda c: c.score, reverse=True)
        results = results[:top_k]

        if not results:
            logger.debug("Index returned no candidates")
            return NoMatch(alternates=[])

        best = results[0]
        if best.score >= primary_threshold:
            logger.debug("Direct match '%s' (score=%.4f)", best.id, best.score)
            return DirectMatch(candidate=best, alternates=results[1:])

        if best.score >= fuzzy_threshold:
            logger.debug("Fuzzy match '%s' (score=%.4f)", best.id, best.score)
            return FuzzyMatch(candidate=best, alternates=results[1 : 1 + FUZZY_ALTERNATES])

        logger.debug(
            "No match: best '%s' scored %.4f < fuzzy threshold %.2f",
            best.id,
            best.score,
            fuzzy_threshold,
        )
        return NoMatch(alternates=results[:NO_MATCH_SUGGESTIONS])
