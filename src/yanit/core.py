"""Core FAQBot class implementing the question-answering pipeline."""

import json
import logging
import time
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from pydantic import ValidationError

from yanit.analytics.metrics import MetricsRecorder
from yanit.analytics.mixpanel import MixpanelSink
from yanit.backends import build_store, get_qdrant_index
from yanit.cache import EmbeddingCache
from yanit.config import Settings
from yanit.exceptions import FAQLoadError, InvalidQuestionError, ProviderError
from yanit.interfaces.analytics import AnalyticsSink
from yanit.interfaces.embedder import BaseEmbedder
from yanit.interfaces.kv_store import KeyValueStore
from yanit.interfaces.vector_index import VectorIndex
from yanit.logging import preview
from yanit.matcher import Matcher
from yanit.ratelimit import RateLimiter
from yanit.types import (
    FAQ,
    AskResponse,
    CacheStatsView,
    CorpusStatus,
    Decision,
    DirectAnswer,
    DirectMatch,
    FuzzyAnswer,
    FuzzyMatch,
    IndexReport,
    InternalError,
    InvalidQuestion,
    MetricsSummary,
    NoMatchAnswer,
    QueryMetric,
    QueryOutcome,
    RateLimited,
    Suggestion,
)
from yanit.utils.normalization import normalize_question
from yanit.utils.tasks import BackgroundTasks

logger = logging.getLogger(__name__)

MSG_EMPTY_QUESTION = "Soru metni boş olamaz."
MSG_UNREADABLE_QUESTION = "Soru anlaşılamadı. Lütfen harf veya rakam içeren bir soru yazın."
MSG_NO_MATCH = (
    "Sorunuzla eşleşen bir cevap bulunamadı. Lütfen destek ekibimizle iletişime geçin."
)
MSG_INTERNAL_ERROR = "Bir hata oluştu. Lütfen tekrar deneyin."
MSG_RATE_LIMITED = "Çok fazla istek gönderildi. Lütfen daha sonra tekrar deneyin."
MSG_FUZZY = 'Şunu mu demek istediniz: "{question}"?'

ANALYTICS_EVENT = "FAQ Query"


class FAQBot:
    """Answers Turkish questions from a fixed FAQ corpus.

    Pipeline per request (strictly sequential):
        rate limit -> normalize -> cached embedding -> vector search ->
        tiered decision -> response

    Metrics and analytics are dispatched as detached tasks and never delay
    or alter the response.

    Args:
        embedder: An instance of BaseEmbedder (e.g., FastEmbedAdapter).
        index: An instance of VectorIndex. If None, creates a QdrantIndex
            from settings.
        store: Shared key-value store. If None, one is built from
            ``settings.store_backend`` (which may itself be ``"none"``).
        settings: Configuration. If None, loads from environment.
        analytics: Analytics sink. If None and ``settings.mixpanel_token`` is
            set, a MixpanelSink is created.

    Example:
        >>> from yanit import FAQBot
        >>> from yanit.embeddings.fastembed_adapter import FastEmbedAdapter
        >>>
        >>> async with FAQBot(embedder=FastEmbedAdapter()) as bot:
        ...     await bot.index_faqs([
        ...         {"id": "1", "question": "Şifremi unuttum", "answer": "..."},
        ...     ])
        ...     response = await bot.ask("sifremi unuttum")
        ...     print(response.status)  # "direct"
    """

    def __init__(
        self,
        embedder: BaseEmbedder,
        index: VectorIndex | None = None,
        store: KeyValueStore | None = None,
        settings: Settings | None = None,
        analytics: AnalyticsSink | None = None,
    ):
        self._settings = settings or Settings()
        self._embedder = embedder

        if index is None:
            index = get_qdrant_index()(self._settings)
        self._index = index

        self._store = store if store is not None else build_store(self._settings)

        if analytics is None and self._settings.mixpanel_token:
            analytics = MixpanelSink(
                token=self._settings.mixpanel_token,
                endpoint=self._settings.mixpanel_endpoint,
                timeout=self._settings.analytics_timeout,
            )
        self._analytics = analytics

        self._tasks = BackgroundTasks()
        s = self._settings
        self._cache = EmbeddingCache(
            embedder,
            self._store if s.embedding_cache_enabled else None,
            tasks=self._tasks,
            ttl_seconds=s.embedding_cache_ttl,
            stats_ttl_seconds=s.cache_stats_ttl,
        )
        self._matcher = Matcher(self._index)
        self._rate_limiter = RateLimiter(
            self._store if s.rate_limit_enabled else None,
            limit=s.rate_limit_max,
            window_seconds=s.rate_limit_window,
        )
        self._metrics = MetricsRecorder(
            self._store if s.metrics_enabled else None,
            daily_ttl_seconds=s.metrics_daily_ttl,
            recent_ttl_seconds=s.metrics_recent_ttl,
            recent_size=s.metrics_recent_size,
            embedding_cost_usd=s.embedding_cost_usd,
        )

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def rate_limiter(self) -> RateLimiter:
        return self._rate_limiter

    @property
    def background(self) -> BackgroundTasks:
        return self._tasks

    # --- Lifecycle ---

    async def start(self) -> None:
        """Connect the index, create the collection and seed it if configured.

        Seeding from ``settings.faq_file`` only happens while the index is
        empty.
        """
        logger.debug(
            "Starting FAQBot: embedder=%s, index=%s, store=%s",
            type(self._embedder).__name__,
            type(self._index).__name__,
            type(self._store).__name__ if self._store else None,
        )
        if hasattr(self._index, "connect"):
            await self._index.connect()
        await self._index.initialize(self._embedder.dimension)

        if self._settings.faq_file and await self._index.count() == 0:
            report = await self.index_faqs(self.load_faqs_from_file(self._settings.faq_file))
            logger.info("Seeded %d FAQs (%d failed)", report.inserted, report.failed)

        logger.info("FAQBot started")

    async def close(self) -> None:
        """Wait for detached writes, then release every collaborator."""
        await self._tasks.drain()
        await self._index.close()
        if self._store is not None:
            await self._store.close()
        if self._analytics is not None:
            await self._analytics.close()
        logger.info("FAQBot closed")

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
        return False

    # --- Question answering ---

    async def ask(self, question: Any, client_key: Optional[str] = None) -> AskResponse:
        """Answer a free-form question.

        Args:
            question: Raw user input.
            client_key: Identity for rate limiting (e.g. client IP). When
                None, no rate limit is applied.

        Returns:
            DirectAnswer, FuzzyAnswer or NoMatchAnswer on success;
            InvalidQuestion, RateLimited or InternalError otherwise.
            Never raises.
        """
        started = time.perf_counter()

        if client_key is not None:
            verdict = await self._rate_limiter.admit(client_key)
            if not verdict.allowed:
                return RateLimited(
                    message=MSG_RATE_LIMITED,
                    retry_after_seconds=verdict.retry_after_seconds or 1,
                )

        try:
            normalized = self._validate(question)
        except InvalidQuestionError as e:
            logger.debug("Rejected question: %s", e)
            return InvalidQuestion(message=str(e))

        logger.debug(
            "Original: '%s' -> normalized: '%s'", preview(question, 80), preview(normalized, 80)
        )

        try:
            vector, cache_hit = await self._cache.get_embedding(normalized)
            decision = await self._matcher.decide(
                vector,
                top_k=self._settings.top_k,
                primary_threshold=self._settings.similarity_threshold,
                fuzzy_threshold=self._settings.fuzzy_threshold,
            )
            latency_ms = (time.perf_counter() - started) * 1000
            response = self._render(decision, cache_hit, latency_ms)
        except Exception as e:
            logger.error("Ask failed for '%s': %s", preview(normalized), e, exc_info=True)
            return InternalError(message=MSG_INTERNAL_ERROR)

        self._dispatch_tracking(normalized, decision, cache_hit, latency_ms)
        logger.info(
            "Answered '%s' -> %s (cached=%s, %.1fms)",
            preview(normalized),
            response.status,
            cache_hit,
            latency_ms,
        )
        return response

    def ask_sync(self, question: Any, client_key: Optional[str] = None) -> AskResponse:
        """Synchronous wrapper for ask().

        Detached cache and metrics writes are awaited before returning, since
        the event loop used for the call is closed afterwards.
        """

        async def _ask_and_drain() -> AskResponse:
            response = await self.ask(question, client_key)
            await self._tasks.drain()
            return response

        return BaseEmbedder._run_sync(_ask_and_drain())

    @staticmethod
    def _validate(question: Any) -> str:
        if not isinstance(question, str) or not question.strip():
            raise InvalidQuestionError(MSG_EMPTY_QUESTION)
        normalized = normalize_question(question)
        if not normalized:
            raise InvalidQuestionError(MSG_UNREADABLE_QUESTION)
        return normalized

    @staticmethod
    def _render(decision: Decision, cache_hit: bool, latency_ms: float) -> AskResponse:
        if isinstance(decision, DirectMatch):
            best = decision.candidate
            return DirectAnswer(
                answer=best.answer,
                confidence=best.score,
                matched_question=best.question,
                category=best.category,
                alternates=[Suggestion.from_candidate(c) for c in decision.alternates],
                cache_hit=cache_hit,
                latency_ms=latency_ms,
            )
        if isinstance(decision, FuzzyMatch):
            best = decision.candidate
            return FuzzyAnswer(
                suggested_question=best.question,
                tentative_answer=best.answer,
                confidence=best.score,
                category=best.category,
                alternates=[Suggestion.from_candidate(c) for c in decision.alternates],
                message=MSG_FUZZY.format(question=best.question),
                cache_hit=cache_hit,
                latency_ms=latency_ms,
            )
        return NoMatchAnswer(
            suggestions=[Suggestion.from_candidate(c) for c in decision.alternates],
            message=MSG_NO_MATCH,
            cache_hit=cache_hit,
            latency_ms=latency_ms,
        )

    def _dispatch_tracking(
        self, normalized: str, decision: Decision, cache_hit: bool, latency_ms: float
    ) -> None:
        if isinstance(decision, DirectMatch):
            outcome, best = QueryOutcome.DIRECT, decision.candidate
        elif isinstance(decision, FuzzyMatch):
            outcome, best = QueryOutcome.FUZZY, decision.candidate
        else:
            outcome = QueryOutcome.NO_MATCH
            best = decision.alternates[0] if decision.alternates else None

        metric = QueryMetric(
            normalized_question=normalized,
            outcome=outcome,
            confidence=best.score if best else None,
            cache_hit=cache_hit,
            latency_ms=latency_ms,
            # Unmatched questions are not attributed to the nearest FAQ's category
            category=best.category if best and outcome != QueryOutcome.NO_MATCH else None,
        )

        if self._metrics.enabled:
            self._tasks.spawn(self._metrics.track(metric), name="metrics")
        if self._analytics is not None:
            properties: Dict[str, Any] = {
                "question": normalized,
                "outcome": outcome.value,
                "success": outcome == QueryOutcome.DIRECT,
                "fuzzy": outcome == QueryOutcome.FUZZY,
                "confidence": metric.confidence,
                "category": metric.category,
                "cached": cache_hit,
                "responseTime": round(latency_ms, 2),
                "matchedQuestion": best.question if best and outcome != QueryOutcome.NO_MATCH else None,
            }
            self._tasks.spawn(self._analytics.track(ANALYTICS_EVENT, properties), name="analytics")

    # --- Embedding cache ---

    async def cache_stats(self) -> CacheStatsView:
        """Hit/miss counters and size of the embedding cache."""
        if not self._cache.enabled:
            return CacheStatsView(enabled=False)
        stats = await self._cache.stats()
        return CacheStatsView(
            enabled=True,
            hits=stats.hits if stats else 0,
            misses=stats.misses if stats else 0,
            hit_rate=stats.hit_rate if stats else 0.0,
            size=await self._cache.size(),
        )

    async def clear_cache(self) -> int:
        """Delete all cached embeddings and reset the stats. Returns count removed."""
        return await self._cache.clear()

    # --- Corpus management ---

    async def index_faqs(self, faqs: Iterable[Union[FAQ, Dict[str, Any]]]) -> IndexReport:
        """Embed FAQ questions and upsert them in batches.

        A batch whose embedding or upsert fails is counted as failed; the
        remaining batches still run.
        """
        records = [f if isinstance(f, FAQ) else FAQ.model_validate(f) for f in faqs]
        report = IndexReport()
        batch_size = self._settings.batch_size

        for i in range(0, len(records), batch_size):
            batch = records[i : i + batch_size]
            texts = [normalize_question(f.question) for f in batch]
            usable = [(f, t) for f, t in zip(batch, texts) if t]
            report.failed += len(batch) - len(usable)
            if not usable:
                continue
            try:
                vectors = await self._embedder.aembed_batch([t for _, t in usable])
                await self._index.upsert([(f, v) for (f, _), v in zip(usable, vectors)])
                report.inserted += len(usable)
            except ProviderError as e:
                logger.error("Indexing batch starting at %d failed: %s", i, e)
                report.failed += len(usable)

        logger.info("Indexed %d FAQs (%d failed)", report.inserted, report.failed)
        return report

    def load_faqs_from_file(self, file_path: str) -> List[FAQ]:
        """Read FAQs from a JSON file.

        Accepted shapes: a list of FAQ objects, or ``{"faqs": [...]}``.

        Raises:
            FAQLoadError: If the file cannot be read or parsed.
        """
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            if isinstance(data, dict):
                data = data.get("faqs", [])
            faqs = [FAQ.model_validate(item) for item in data]
        except (OSError, ValueError, TypeError, ValidationError) as e:
            raise FAQLoadError(f"Failed to load FAQs from '{file_path}': {e}") from e
        logger.info("Loaded %d FAQs from '%s'", len(faqs), file_path)
        return faqs

    async def seed_from_file(self, file_path: str) -> IndexReport:
        """Load FAQs from a JSON file and index them."""
        return await self.index_faqs(self.load_faqs_from_file(file_path))

    async def delete_faqs(self, ids: Sequence[str]) -> None:
        """Remove FAQs from the index by id."""
        await self._index.delete_by_ids(list(ids))

    async def status(self) -> CorpusStatus:
        """Report whether the FAQ index has been seeded."""
        try:
            count = await self._index.count()
        except Exception as e:
            logger.error("Status check failed: %s", e)
            return CorpusStatus(
                status="error",
                initialized=False,
                message="Veritabanı durumu kontrol edilirken hata oluştu",
            )
        if count > 0:
            return CorpusStatus(
                status="ready",
                initialized=True,
                message="FAQ veritabanı yüklendi ve hazır",
                faq_count=count,
            )
        return CorpusStatus(
            status="empty",
            initialized=False,
            message="FAQ veritabanı boş - seed script çalıştırın",
            faq_count=0,
        )

    # --- Metrics ---

    async def metrics_summary(self, days: int = 7) -> Optional[MetricsSummary]:
        return await self._metrics.summary(days)

    async def recent_queries(self, limit: int = 20) -> List[QueryMetric]:
        return await self._metrics.recent(limit)

    async def clear_metrics(self) -> int:
        return await self._metrics.clear()
