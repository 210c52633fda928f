"""Per-query metrics folded into daily aggregates and a bounded recent log."""

import logging
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

from pydantic import ValidationError

from yanit.interfaces.kv_store import KeyValueStore
from yanit.types import (
    CategoryCount,
    DailyMetrics,
    MetricsSummary,
    QueryMetric,
    QueryOutcome,
)

logger = logging.getLogger(__name__)

METRICS_PREFIX = "metrics:"
DAILY_PREFIX = f"{METRICS_PREFIX}daily:"
RECENT_KEY = f"{METRICS_PREFIX}recent"

_TOP_CATEGORIES = 5


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MetricsRecorder:
    """Records one QueryMetric per answered question in the shared store.

    Both the daily aggregate and the recent log are read-modify-write
    records; concurrent requests may drop an update. Store faults are logged
    and swallowed.

    Args:
        store: Shared store. ``None`` drops every metric.
        daily_ttl_seconds: Lifetime of a daily aggregate.
        recent_ttl_seconds: Lifetime of the recent log.
        recent_size: Capacity of the recent log (at most 100).
        embedding_cost_usd: Estimated price of one embedding call.
        clock: Returns the current UTC datetime.
    """

    def __init__(
        self,
        store: KeyValueStore | None,
        daily_ttl_seconds: int = 2592000,
        recent_ttl_seconds: int = 604800,
        recent_size: int = 100,
        embedding_cost_usd: float = 0.003,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._store = store
        self._daily_ttl = daily_ttl_seconds
        self._recent_ttl = recent_ttl_seconds
        self._recent_size = max(1, min(recent_size, 100))
        self._cost = embedding_cost_usd
        self._clock = clock

    @property
    def enabled(self) -> bool:
        return self._store is not None

    async def track(self, metric: QueryMetric) -> None:
        """Fold *metric* into its day's aggregate and the recent log."""
        if self._store is None:
            return
        try:
            await self._update_daily(metric)
            await self._push_recent(metric)
        except Exception as e:
            logger.warning("Error tracking query metrics: %s", e)

    async def summary(self, days: int = 7) -> Optional[MetricsSummary]:
        """Aggregate the last *days* daily records (today included).

        Returns:
            MetricsSummary, or None when nothing was recorded in the period.
        """
        if self._store is None:
            return None

        today = self._clock().date()
        daily: List[DailyMetrics] = []
        try:
            for i in range(max(days, 1)):
                day = await self._load_daily((today - timedelta(days=i)).isoformat())
                if day is not None:
                    daily.append(day)
        except Exception as e:
            logger.warning("Error reading metrics summary: %s", e)
            return None

        if not daily:
            return None

        total = sum(d.total_queries for d in daily)
        direct = sum(d.direct_count for d in daily)
        fuzzy = sum(d.fuzzy_count for d in daily)
        cache_hits = sum(d.cache_hits for d in daily)
        conf_sum = sum(d.confidence_sum for d in daily)
        conf_count = sum(d.confidence_count for d in daily)
        latency_sum = sum(d.latency_sum_ms for d in daily)
        categories: Counter = Counter()
        for d in daily:
            categories.update(d.categories)

        def pct(part: int) -> float:
            return round(part / total * 100, 2) if total else 0.0

        return MetricsSummary(
            total_queries=total,
            direct_rate=pct(direct),
            fuzzy_rate=pct(fuzzy),
            cache_hit_rate=pct(cache_hits),
            avg_confidence=round(conf_sum / conf_count, 4) if conf_count else 0.0,
            avg_latency_ms=round(latency_sum / total, 2) if total else 0.0,
            estimated_cost_usd=round((total - cache_hits) * self._cost, 4),
            top_categories=[
                CategoryCount(category=c, count=n)
                for c, n in categories.most_common(_TOP_CATEGORIES)
            ],
            period_from=daily[-1].date,
            period_to=daily[0].date,
        )

    async def recent(self, limit: int = 20) -> List[QueryMetric]:
        """Return up to *limit* most recent metrics, newest first."""
        if self._store is None:
            return []
        try:
            return (await self._load_recent())[:limit]
        except Exception as e:
            logger.warning("Error reading recent queries: %s", e)
            return []

    async def clear(self) -> int:
        """Delete all metrics records. Returns the number of keys removed."""
        if self._store is None:
            return 0
        cleared = 0
        try:
            for key in await self._store.list(METRICS_PREFIX):
                if await self._store.delete(key):
                    cleared += 1
            logger.info("Metrics cleared: %d entries deleted", cleared)
        except Exception as e:
            logger.warning("Error clearing metrics after %d entries: %s", cleared, e)
        return cleared

    # --- Private methods ---

    async def _load_daily(self, date: str) -> Optional[DailyMetrics]:
        raw = await self._store.get(f"{DAILY_PREFIX}{date}")
        if raw is None:
            return None
        try:
            return DailyMetrics.model_validate(raw)
        except ValidationError:
            logger.warning("Discarding malformed daily metrics for %s", date)
            return None

    async def _update_daily(self, metric: QueryMetric) -> None:
        date = metric.timestamp.astimezone(timezone.utc).date().isoformat()
        daily = await self._load_daily(date) or DailyMetrics(date=date)

        daily.total_queries += 1
        if metric.outcome == QueryOutcome.DIRECT:
            daily.direct_count += 1
        elif metric.outcome == QueryOutcome.FUZZY:
            daily.fuzzy_count += 1
        else:
            daily.no_match_count += 1
        if metric.cache_hit:
            daily.cache_hits += 1
        if metric.confidence is not None:
            daily.confidence_sum += metric.confidence
            daily.confidence_count += 1
        daily.latency_sum_ms += metric.latency_ms
        if metric.category:
            daily.categories[metric.category] = daily.categories.get(metric.category, 0) + 1

        await self._store.put(
            f"{DAILY_PREFIX}{date}", daily.model_dump(mode="json"), ttl_seconds=self._daily_ttl
        )

    async def _load_recent(self) -> List[QueryMetric]:
        raw = await self._store.get(RECENT_KEY)
        if not raw:
            return []
        try:
            return [QueryMetric.model_validate(item) for item in raw]
        except (ValidationError, TypeError):
            logger.warning("Discarding malformed recent-query log")
            return []

    async def _push_recent(self, metric: QueryMetric) -> None:
        recent = [metric] + await self._load_recent()
        await self._store.put(
            RECENT_KEY,
            [m.model_dump(mode="json") for m in recent[: self._recent_size]],
            ttl_seconds=self._recent_ttl,
        )
