"""Data models: FAQ records, decisions, cache and rate-limit records, metrics, responses."""

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# --- Corpus ---


class FAQ(BaseModel):
    """A single question/answer pair of the FAQ corpus."""

    id: str = Field(min_length=1)
    question: str = Field(min_length=1)
    answer: str = Field(min_length=1)
    category: str = Field(default="general")
    keywords: List[str] = Field(default_factory=list)


class MatchCandidate(BaseModel):
    """A single neighbour returned by the vector index."""

    model_config = ConfigDict(frozen=True)

    id: str
    question: str = ""
    answer: str = ""
    category: str = "general"
    score: float = Field(ge=0.0, le=1.0)


# --- Decisions ---


class DirectMatch(BaseModel):
    """Best candidate scored at or above the primary threshold."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["direct"] = "direct"
    candidate: MatchCandidate
    alternates: List[MatchCandidate] = Field(default_factory=list)


class FuzzyMatch(BaseModel):
    """Best candidate scored between the fuzzy and primary thresholds."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["fuzzy"] = "fuzzy"
    candidate: MatchCandidate
    alternates: List[MatchCandidate] = Field(default_factory=list)


class NoMatch(BaseModel):
    """No candidate crossed the fuzzy threshold (or the index was empty)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["no_match"] = "no_match"
    alternates: List[MatchCandidate] = Field(default_factory=list)


Decision = Annotated[Union[DirectMatch, FuzzyMatch, NoMatch], Field(discriminator="kind")]


# --- Embedding cache ---


class CacheEntry(BaseModel):
    """A cached embedding vector. Replaced as a whole, never mutated."""

    model_config = ConfigDict(frozen=True)

    vector: List[float] = Field(min_length=1)
    source_text: str
    created_at: datetime = Field(default_factory=_utcnow)


class CacheStats(BaseModel):
    """Hit/miss counters of the embedding cache."""

    total_queries: int = Field(default=0, ge=0)
    hits: int = Field(default=0, ge=0)
    misses: int = Field(default=0, ge=0)
    hit_rate: float = Field(default=0.0, ge=0.0, le=1.0)
    last_reset: datetime = Field(default_factory=_utcnow)


class CacheStatsView(BaseModel):
    """Cache statistics as exposed to the service layer."""

    enabled: bool
    hits: Optional[int] = None
    misses: Optional[int] = None
    hit_rate: Optional[float] = None
    size: Optional[int] = None


# --- Rate limiting ---


class RateLimitWindow(BaseModel):
    """Request counter of one client within one fixed window."""

    window_start: float = Field(description="Unix timestamp (seconds) when the window opened")
    count: int = Field(default=1, ge=0)


class RateLimitDecision(BaseModel):
    """Outcome of a rate-limit check."""

    model_config = ConfigDict(frozen=True)

    allowed: bool
    retry_after_seconds: Optional[int] = Field(default=None, ge=1)


# --- Metrics ---


class QueryOutcome(str, Enum):
    """Which decision tier answered the question."""

    DIRECT = "direct"
    FUZZY = "fuzzy"
    NO_MATCH = "no_match"


class QueryMetric(BaseModel):
    """One answered request. Written once."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(default_factory=_utcnow)
    normalized_question: str
    outcome: QueryOutcome
    confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    cache_hit: bool = False
    latency_ms: float = Field(default=0.0, ge=0.0)
    category: Optional[str] = None


class DailyMetrics(BaseModel):
    """Per-day aggregate of QueryMetric records."""

    date: str = Field(description="YYYY-MM-DD (UTC)")
    total_queries: int = 0
    direct_count: int = 0
    fuzzy_count: int = 0
    no_match_count: int = 0
    cache_hits: int = 0
    confidence_sum: float = 0.0
    confidence_count: int = 0
    latency_sum_ms: float = 0.0
    categories: Dict[str, int] = Field(default_factory=dict)


class CategoryCount(BaseModel):
    category: str
    count: int


class MetricsSummary(BaseModel):
    """Aggregate over the last N days of DailyMetrics."""

    total_queries: int
    direct_rate: float = Field(description="Percentage of direct answers")
    fuzzy_rate: float = Field(description="Percentage of fuzzy answers")
    cache_hit_rate: float = Field(description="Percentage of cached embeddings")
    avg_confidence: float
    avg_latency_ms: float
    estimated_cost_usd: float
    top_categories: List[CategoryCount] = Field(default_factory=list)
    period_from: str
    period_to: str


# --- Responses ---


class Suggestion(BaseModel):
    """A related FAQ offered alongside (or instead of) an answer."""

    id: str
    question: str
    category: str = "general"

    @classmethod
    def from_candidate(cls, candidate: MatchCandidate) -> "Suggestion":
        return cls(id=candidate.id, question=candidate.question, category=candidate.category)


class _Answered(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: Optional[str] = None
    cache_hit: bool = False
    latency_ms: float = 0.0


class DirectAnswer(_Answered):
    status: Literal["direct"] = "direct"
    answer: str
    confidence: float = Field(ge=0.0, le=1.0)
    matched_question: str
    category: str = "general"
    alternates: List[Suggestion] = Field(default_factory=list)


class FuzzyAnswer(_Answered):
    status: Literal["fuzzy"] = "fuzzy"
    suggested_question: str
    tentative_answer: str
    confidence: float = Field(ge=0.0, le=1.0)
    category: str = "general"
    alternates: List[Suggestion] = Field(default_factory=list)


class NoMatchAnswer(_Answered):
    status: Literal["no_match"] = "no_match"
    suggestions: List[Suggestion] = Field(default_factory=list)


class InvalidQuestion(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["invalid"] = "invalid"
    message: str


class RateLimited(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["rate_limited"] = "rate_limited"
    message: str
    retry_after_seconds: int = Field(ge=1)


class InternalError(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["error"] = "error"
    message: str


AskResponse = Annotated[
    Union[DirectAnswer, FuzzyAnswer, NoMatchAnswer, InvalidQuestion, RateLimited, InternalError],
    Field(discriminator="status"),
]


# --- Admin ---


class IndexReport(BaseModel):
    """Result of a bulk FAQ upsert."""

    inserted: int = 0
    failed: int = 0


class CorpusStatus(BaseModel):
    """Whether the vector index holds any FAQ."""

    status: Literal["ready", "empty", "error"]
    initialized: bool
    message: str
    faq_count: Optional[int] = None
    timestamp: datetime = Field(default_factory=_utcnow)
