"""Pydantic-based configuration with environment variable support (YANIT_ prefix)."""

from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration for a FAQBot instance."""

    model_config = SettingsConfigDict(
        env_prefix="YANIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Vector index (Qdrant) ---
    qdrant_mode: Literal["memory", "docker", "cloud"] = Field(
        default="memory",
        description="Qdrant connection mode",
    )
    qdrant_host: str = Field(default="localhost", description="Qdrant host for docker/cloud mode")
    qdrant_port: int = Field(default=6333, ge=1, le=65535, description="Qdrant port")
    qdrant_url: Optional[str] = Field(default=None, description="Full Qdrant URL (overrides host:port)")
    qdrant_api_key: Optional[str] = Field(default=None, description="Qdrant Cloud API key")
    collection_name: str = Field(default="faqs", min_length=1, description="FAQ collection name")
    hnsw_m: int = Field(default=16, ge=4, le=64, description="HNSW edges per node")
    hnsw_ef_construct: int = Field(default=100, ge=50, le=500, description="HNSW construction search depth")
    on_disk: bool = Field(default=False, description="Store vectors on disk")

    # --- Embedding provider ---
    embedding_provider: Literal["fastembed", "openai"] = Field(default="fastembed")
    embedding_model: str = Field(
        default="sentence-transformers/paraphrase-multilingual-MiniLM-L12-v2",
        description="Model identifier passed to the embedding adapter",
    )
    embedding_dimensions: Optional[int] = Field(
        default=None, ge=1, description="Expected vector length; None = trust the model"
    )

    # --- Decision thresholds ---
    similarity_threshold: float = Field(
        default=0.70, ge=0.0, le=1.0, description="Minimum score for a direct answer"
    )
    fuzzy_threshold: float = Field(
        default=0.60, ge=0.0, le=1.0, description="Minimum score for a 'did you mean?' answer"
    )
    top_k: int = Field(default=3, ge=1, le=100, description="Neighbours fetched per question")

    # --- Shared key-value store ---
    store_backend: Literal["memory", "redis", "none"] = Field(
        default="memory",
        description="Backend for embedding cache, rate limits and metrics ('none' disables them)",
    )
    redis_url: str = Field(default="redis://localhost:6379/0")

    # --- Embedding cache ---
    embedding_cache_enabled: bool = Field(default=True)
    embedding_cache_ttl: int = Field(default=604800, ge=1, description="Cache entry TTL (7 days)")
    cache_stats_ttl: int = Field(default=2592000, ge=1, description="Stats record TTL (30 days)")

    # --- Rate limiting ---
    rate_limit_enabled: bool = Field(default=True)
    rate_limit_max: int = Field(default=60, ge=1, description="Requests allowed per window")
    rate_limit_window: int = Field(default=60, ge=1, description="Fixed window length in seconds")

    # --- Metrics ---
    metrics_enabled: bool = Field(default=True)
    metrics_daily_ttl: int = Field(default=2592000, ge=1, description="Daily aggregate TTL (30 days)")
    metrics_recent_ttl: int = Field(default=604800, ge=1, description="Recent ring TTL (7 days)")
    metrics_recent_size: int = Field(default=100, ge=1, le=100, description="Recent ring capacity")
    embedding_cost_usd: float = Field(
        default=0.003, ge=0.0, description="Estimated cost of one embedding call"
    )

    # --- Analytics (Mixpanel) ---
    mixpanel_token: Optional[str] = Field(default=None, description="Mixpanel project token")
    mixpanel_endpoint: str = Field(default="https://api-eu.mixpanel.com/track")
    analytics_timeout: float = Field(default=5.0, gt=0.0, description="HTTP timeout in seconds")

    # --- FAQ loading ---
    faq_file: Optional[str] = Field(default=None, description="Path to a JSON FAQ seed file")
    batch_size: int = Field(default=100, ge=1, le=10000, description="Batch size for bulk upsert")

    # --- Validators ---
    @field_validator("fuzzy_threshold")
    @classmethod
    def fuzzy_not_above_primary(cls, v: float, info) -> float:  # type: ignore[type-arg]
        primary = info.data.get("similarity_threshold", 0.70)
        if v > primary:
            raise ValueError("Fuzzy threshold must not exceed the similarity threshold")
        return v
