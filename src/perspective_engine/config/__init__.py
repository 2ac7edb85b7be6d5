"""Configuration module for the perspective engine."""

from perspective_engine.config.factory import (
    create_breaker,
    create_database,
    create_embedder,
    create_extractor,
    create_from_config,
    create_scoring,
)
from perspective_engine.config.loader import get_default_config_path, load_config
from perspective_engine.config.models import (
    BoundedParallelScoringConfig,
    CircuitBreakerConfig,
    ClaudeEntityExtractorConfig,
    DatabaseConfig,
    EmbedderConfig,
    EngineConfig,
    EntityExtractorConfig,
    FeedConfig,
    LoggingConfig,
    MatcherConfig,
    NoOpEntityExtractorConfig,
    OpenAIEmbedderConfig,
    ResponseCacheConfig,
    ScoringConfig,
    SentenceTransformerEmbedderConfig,
    SequentialScoringConfig,
)

__all__ = [
    "BoundedParallelScoringConfig",
    "CircuitBreakerConfig",
    "ClaudeEntityExtractorConfig",
    "DatabaseConfig",
    "EmbedderConfig",
    "EngineConfig",
    "EntityExtractorConfig",
    "FeedConfig",
    "LoggingConfig",
    "MatcherConfig",
    "NoOpEntityExtractorConfig",
    "OpenAIEmbedderConfig",
    "ResponseCacheConfig",
    "ScoringConfig",
    "SentenceTransformerEmbedderConfig",
    "SequentialScoringConfig",
    "create_breaker",
    "create_database",
    "create_embedder",
    "create_extractor",
    "create_from_config",
    "create_scoring",
    "get_default_config_path",
    "load_config",
]
