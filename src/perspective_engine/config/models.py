"""Pydantic configuration models for perspective engine components."""

from typing import Annotated, Literal

from pydantic import BaseModel, Field

from perspective_engine.data import MatchOptions

# ============================================================
# Text analysis
# ============================================================


class CircuitBreakerConfig(BaseModel):
    """Configuration for the circuit breaker guarding a service client."""

    failure_threshold: int = Field(default=5, ge=1)
    reset_timeout_seconds: float = Field(default=60.0, gt=0)
    half_open_max_calls: int = Field(default=3, ge=1)

    model_config = {"frozen": True}


class ResponseCacheConfig(BaseModel):
    """Configuration for a client's bounded response cache."""

    max_entries: int = Field(default=1024, ge=1)
    ttl_seconds: float = Field(default=24 * 60 * 60, gt=0)

    model_config = {"frozen": True}


class ClaudeEntityExtractorConfig(BaseModel):
    """Configuration for ClaudeEntityExtractor."""

    type: Literal["claude"] = "claude"
    model: str = "claude-haiku-4-5-20251001"
    max_chars: int = Field(default=1500, ge=1)
    timeout_seconds: float = Field(default=8.0, gt=0)
    max_retries: int = Field(default=2, ge=0)
    breaker: CircuitBreakerConfig = Field(default_factory=CircuitBreakerConfig)
    cache: ResponseCacheConfig = Field(default_factory=ResponseCacheConfig)

    model_config = {"frozen": True}


class NoOpEntityExtractorConfig(BaseModel):
    """Extractor that returns no entities (disables matching)."""

    type: Literal["noop"] = "noop"

    model_config = {"frozen": True}


EntityExtractorConfig = Annotated[
    ClaudeEntityExtractorConfig | NoOpEntityExtractorConfig,
    Field(discriminator="type"),
]


class OpenAIEmbedderConfig(BaseModel):
    """Configuration for OpenAIEmbedder."""

    type: Literal["openai"] = "openai"
    model: str = "text-embedding-3-small"
    base_url: str | None = None
    timeout_seconds: float = Field(default=8.0, gt=0)
    max_retries: int = Field(default=2, ge=0)
    breaker: CircuitBreakerConfig = Field(default_factory=CircuitBreakerConfig)
    cache: ResponseCacheConfig = Field(default_factory=ResponseCacheConfig)

    model_config = {"frozen": True}


class SentenceTransformerEmbedderConfig(BaseModel):
    """Configuration for SentenceTransformerEmbedder."""

    type: Literal["sentence_transformer"] = "sentence_transformer"
    model_name: str = "all-MiniLM-L6-v2"
    timeout_seconds: float = Field(default=8.0, gt=0)
    breaker: CircuitBreakerConfig = Field(default_factory=CircuitBreakerConfig)
    cache: ResponseCacheConfig = Field(default_factory=ResponseCacheConfig)

    model_config = {"frozen": True}


EmbedderConfig = Annotated[
    OpenAIEmbedderConfig | SentenceTransformerEmbedderConfig,
    Field(discriminator="type"),
]


# ============================================================
# Scoring strategies
# ============================================================


class SequentialScoringConfig(BaseModel):
    """Score candidates one at a time."""

    type: Literal["sequential"] = "sequential"

    model_config = {"frozen": True}


class BoundedParallelScoringConfig(BaseModel):
    """Score candidates concurrently under a hard cap."""

    type: Literal["bounded_parallel"] = "bounded_parallel"
    max_concurrency: int = Field(default=3, ge=1, le=5)

    model_config = {"frozen": True}


ScoringConfig = Annotated[
    SequentialScoringConfig | BoundedParallelScoringConfig,
    Field(discriminator="type"),
]


# ============================================================
# Matcher & feed
# ============================================================


class MatcherConfig(BaseModel):
    """Configuration for PerspectiveMatcher."""

    time_window_hours: float = Field(default=24, gt=0)
    entity_threshold: float = Field(default=0.25, ge=0, le=1)
    combined_threshold: float = Field(default=0.65, ge=0, le=1)
    max_results: int = Field(default=5, ge=1)
    max_candidates: int = Field(default=50, ge=1)
    entity_weight: float = Field(default=0.4, ge=0)
    semantic_weight: float = Field(default=0.6, ge=0)
    tie_margin: float = Field(default=0.1, ge=0)
    text_max_chars: int = Field(default=2000, ge=1)
    scoring: SequentialScoringConfig | BoundedParallelScoringConfig = Field(
        default_factory=SequentialScoringConfig, discriminator="type"
    )

    model_config = {"frozen": True}

    def to_options(self) -> MatchOptions:
        return MatchOptions(
            time_window_hours=self.time_window_hours,
            entity_threshold=self.entity_threshold,
            combined_threshold=self.combined_threshold,
            max_results=self.max_results,
        )


class FeedConfig(BaseModel):
    """Configuration for BalancedFeedBuilder."""

    scan_size: int = Field(default=100, ge=1)

    model_config = {"frozen": True}


# ============================================================
# Storage & logging
# ============================================================


class DatabaseConfig(BaseModel):
    """Configuration for the SQLAlchemy database."""

    url: str = "sqlite+aiosqlite:///perspectives.db"
    timeout_seconds: float = Field(default=10.0, gt=0)
    echo: bool = False

    model_config = {"frozen": True}


class LoggingConfig(BaseModel):
    """Configuration for engine logging."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    model_config = {"frozen": True}


# ============================================================
# Root Config
# ============================================================


class EngineConfig(BaseModel):
    """Root configuration for the perspective engine."""

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    extractor: ClaudeEntityExtractorConfig | NoOpEntityExtractorConfig = Field(
        default_factory=ClaudeEntityExtractorConfig, discriminator="type"
    )
    embedder: OpenAIEmbedderConfig | SentenceTransformerEmbedderConfig = Field(
        default_factory=OpenAIEmbedderConfig, discriminator="type"
    )
    matcher: MatcherConfig = Field(default_factory=MatcherConfig)
    feed: FeedConfig = Field(default_factory=FeedConfig)
    label_language: Literal["en", "tr"] = "en"
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"frozen": True}
