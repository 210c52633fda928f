"""Unit tests for yanit.matcher.Matcher tier selection."""

import pytest

from yanit.exceptions import VectorIndexError
from yanit.matcher import Matcher
from yanit.types import DirectMatch, FuzzyMatch, NoMatch
from tests.conftest import StubIndex, candidate

VECTOR = [0.1, 0.2, 0.3]


async def _decide(candidates, primary=0.70, fuzzy=0.60, top_k=3, sorted_results=True):
    matcher = Matcher(StubIndex(candidates, sorted_results=sorted_results))
    return await matcher.decide(VECTOR, top_k, primary, fuzzy)


class TestTiers:
    async def test_direct(self):
        decision = await _decide([candidate("a", 0.91), candidate("b", 0.72)])
        assert isinstance(decision, DirectMatch)
        assert decision.candidate.id == "a"
        assert [c.id for c in decision.alternates] == ["b"]

    async def test_fuzzy(self):
        decision = await _decide([candidate("a", 0.65), candidate("b", 0.62), candidate("c", 0.61)])
        assert isinstance(decision, FuzzyMatch)
        assert decision.candidate.id == "a"
        assert [c.id for c in decision.alternates] == ["b", "c"]

    async def test_no_match_with_suggestions(self):
        decision = await _decide([candidate("a", 0.45), candidate("b", 0.40), candidate("c", 0.30)])
        assert isinstance(decision, NoMatch)
        assert [c.id for c in decision.alternates] == ["a", "b", "c"]

    async def test_empty_index(self):
        decision = await _decide([])
        assert isinstance(decision, NoMatch)
        assert decision.alternates == []


class TestBoundaries:
    async def test_primary_threshold_inclusive(self):
        decision = await _decide([candidate("a", 0.70)])
        assert isinstance(decision, DirectMatch)

    async def test_fuzzy_threshold_inclusive(self):
        decision = await _decide([candidate("a", 0.60)])
        assert isinstance(decision, FuzzyMatch)

    async def test_just_below_fuzzy(self):
        decision = await _decide([candidate("a", 0.5999)])
        assert isinstance(decision, NoMatch)

    async def test_equal_thresholds_skip_fuzzy_tier(self):
        assert isinstance(await _decide([candidate("a", 0.65)], 0.65, 0.65), DirectMatch)
        assert isinstance(await _decide([candidate("a", 0.64)], 0.65, 0.65), NoMatch)

    async def test_fuzzy_above_primary_rejected(self):
        with pytest.raises(ValueError):
            await _decide([candidate("a", 0.9)], primary=0.6, fuzzy=0.7)

    @pytest.mark.parametrize("low,high", [(0.55, 0.62), (0.62, 0.75), (0.69, 0.71), (0.3, 0.99)])
    async def test_monotonic_in_score(self, low, high):
        rank = {"no_match": 0, "fuzzy": 1, "direct": 2}
        d_low = await _decide([candidate("a", low)])
        d_high = await _decide([candidate("a", high)])
        assert rank[d_high.kind] >= rank[d_low.kind]

    @pytest.mark.parametrize(
        "score,loose,strict",
        [
            (0.64, (0.70, 0.60), (0.70, 0.65)),
            (0.75, (0.70, 0.60), (0.80, 0.78)),
            (0.72, (0.70, 0.60), (0.75, 0.60)),
        ],
    )
    async def test_raising_thresholds_never_promotes(self, score, loose, strict):
        rank = {"no_match": 0, "fuzzy": 1, "direct": 2}
        d_loose = await _decide([candidate("a", score)], *loose)
        d_strict = await _decide([candidate("a", score)], *strict)
        assert rank[d_strict.kind] <= rank[d_loose.kind]

    async def test_raised_thresholds_demote_fuzzy_and_direct(self):
        assert isinstance(await _decide([candidate("a", 0.64)], 0.70, 0.60), FuzzyMatch)
        assert isinstance(await _decide([candidate("a", 0.64)], 0.70, 0.65), NoMatch)
        assert isinstance(await _decide([candidate("a", 0.75)], 0.70, 0.60), DirectMatch)
        assert isinstance(await _decide([candidate("a", 0.75)], 0.80, 0.78), NoMatch)


class TestAlternates:
    async def test_direct_alternates_are_rest_of_top_k(self):
        decision = await _decide(
            [candidate("a", 0.9), candidate("b", 0.5), candidate("c", 0.1)]
        )
        assert [c.id for c in decision.alternates] == ["b", "c"]

    async def test_fuzzy_alternates_capped_at_two(self):
        cands = [candidate(str(i), 0.65 - i * 0.01) for i in range(5)]
        decision = await _decide(cands, top_k=5)
        assert isinstance(decision, FuzzyMatch)
        assert len(decision.alternates) == 2

    async def test_results_truncated_to_top_k(self):
        cands = [candidate(str(i), 0.95 - i * 0.01) for i in range(6)]
        decision = await _decide(cands, top_k=3)
        assert len(decision.alternates) == 2

    async def test_unsorted_index_is_sorted(self):
        decision = await _decide(
            [candidate("low", 0.2), candidate("high", 0.8), candidate("mid", 0.65)],
            sorted_results=False,
        )
        assert isinstance(decision, DirectMatch)
        assert decision.candidate.id == "high"
        assert [c.id for c in decision.alternates] == ["mid", "low"]

    async def test_index_error_propagates(self):
        index = StubIndex([candidate("a", 0.9)])
        index.fail = True
        with pytest.raises(VectorIndexError):
            await Matcher(index).decide(VECTOR, 3, 0.7, 0.6)
