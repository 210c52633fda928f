"""Unit tests for yanit.analytics.metrics.MetricsRecorder."""

from datetime import datetime, timedelta, timezone

import pytest

from yanit.analytics.metrics import DAILY_PREFIX, RECENT_KEY, MetricsRecorder
from yanit.backends.memory_store import MemoryStore
from yanit.types import QueryMetric, QueryOutcome
from tests.conftest import FailingStore

NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


def _metric(outcome=QueryOutcome.DIRECT, confidence=0.9, cache_hit=False, latency=10.0,
            category="hesap", when=NOW, question="şifremi unuttum"):
    return QueryMetric(
        timestamp=when,
        normalized_question=question,
        outcome=outcome,
        confidence=confidence,
        cache_hit=cache_hit,
        latency_ms=latency,
        category=category,
    )


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def recorder(store):
    return MetricsRecorder(store, recent_size=3, embedding_cost_usd=0.01, clock=lambda: NOW)


class TestTrack:
    async def test_daily_aggregate(self, recorder, store):
        await recorder.track(_metric())
        await recorder.track(_metric(QueryOutcome.FUZZY, confidence=0.65, cache_hit=True))
        await recorder.track(_metric(QueryOutcome.NO_MATCH, confidence=None, category=None))

        daily = await store.get(f"{DAILY_PREFIX}2024-03-15")
        assert daily["total_queries"] == 3
        assert daily["direct_count"] == 1
        assert daily["fuzzy_count"] == 1
        assert daily["no_match_count"] == 1
        assert daily["cache_hits"] == 1
        assert daily["confidence_count"] == 2
        assert daily["categories"] == {"hesap": 2}

    async def test_recent_bounded_newest_first(self, recorder):
        for i in range(5):
            await recorder.track(_metric(question=f"soru {i}"))
        recent = await recorder.recent(limit=10)
        assert [m.normalized_question for m in recent] == ["soru 4", "soru 3", "soru 2"]

    async def test_recent_limit(self, recorder):
        for i in range(3):
            await recorder.track(_metric(question=f"soru {i}"))
        assert len(await recorder.recent(limit=1)) == 1

    async def test_store_down_is_silent(self):
        recorder = MetricsRecorder(FailingStore(), clock=lambda: NOW)
        await recorder.track(_metric())
        assert await recorder.summary() is None
        assert await recorder.recent() == []
        assert await recorder.clear() == 0

    async def test_disabled(self):
        recorder = MetricsRecorder(None)
        assert not recorder.enabled
        await recorder.track(_metric())
        assert await recorder.summary() is None


class TestSummary:
    async def test_rates_and_cost(self, recorder):
        await recorder.track(_metric(confidence=0.9, latency=10.0))
        await recorder.track(_metric(confidence=0.8, latency=20.0, cache_hit=True))
        await recorder.track(_metric(QueryOutcome.FUZZY, confidence=0.64, latency=30.0))
        await recorder.track(
            _metric(QueryOutcome.NO_MATCH, confidence=None, latency=40.0, category=None)
        )

        summary = await recorder.summary(days=7)
        assert summary.total_queries == 4
        assert summary.direct_rate == 50.0
        assert summary.fuzzy_rate == 25.0
        assert summary.cache_hit_rate == 25.0
        assert summary.avg_confidence == pytest.approx(0.78, abs=1e-4)
        assert summary.avg_latency_ms == 25.0
        assert summary.estimated_cost_usd == pytest.approx(0.03)
        assert summary.top_categories[0].category == "hesap"
        assert summary.top_categories[0].count == 3

    async def test_spans_multiple_days(self, recorder):
        await recorder.track(_metric(when=NOW - timedelta(days=2)))
        await recorder.track(_metric(when=NOW))
        await recorder.track(_metric(when=NOW - timedelta(days=30)))

        summary = await recorder.summary(days=7)
        assert summary.total_queries == 2
        assert summary.period_from == "2024-03-13"
        assert summary.period_to == "2024-03-15"

    async def test_top_categories_capped(self, recorder):
        for i in range(7):
            for _ in range(i + 1):
                await recorder.track(_metric(category=f"kategori-{i}"))
        summary = await recorder.summary()
        assert len(summary.top_categories) == 5
        assert summary.top_categories[0].category == "kategori-6"

    async def test_empty_period(self, recorder):
        assert await recorder.summary() is None


class TestClear:
    async def test_clear_removes_metrics_only(self, recorder, store):
        await store.put("emb:stats", {"hits": 1})
        await recorder.track(_metric())
        assert await store.get(RECENT_KEY) is not None

        assert await recorder.clear() == 2
        assert await store.get(RECENT_KEY) is None
        assert await store.get("emb:stats") is not None
        assert await recorder.clear() == 0
