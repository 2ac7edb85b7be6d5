"""Factory functions to create components from configuration."""

import numpy as np
from numpy.typing import NDArray

from perspective_engine.analysis.base import EntityExtractor, TextEmbedder
from perspective_engine.analysis.breaker import CircuitBreaker
from perspective_engine.analysis.claude import ClaudeEntityExtractor
from perspective_engine.analysis.embeddings import OpenAIEmbedder, SentenceTransformerEmbedder
from perspective_engine.analysis.noop import NoOpEntityExtractor
from perspective_engine.analysis.ttl_cache import TTLCache
from perspective_engine.config.models import (
    BoundedParallelScoringConfig,
    CircuitBreakerConfig,
    ClaudeEntityExtractorConfig,
    DatabaseConfig,
    EngineConfig,
    NoOpEntityExtractorConfig,
    OpenAIEmbedderConfig,
    ResponseCacheConfig,
    SentenceTransformerEmbedderConfig,
    SequentialScoringConfig,
)
from perspective_engine.data import ExtractedEntities
from perspective_engine.feed.balanced import BalancedFeedBuilder
from perspective_engine.matcher.perspectives import PerspectiveMatcher
from perspective_engine.matcher.scoring import (
    BoundedParallelScoring,
    ScoringStrategy,
    SequentialScoring,
)
from perspective_engine.similarity.semantic import SemanticScorer
from perspective_engine.store.sql import (
    Database,
    SqlArticleStore,
    SqlPerspectiveCache,
    SqlSourceRegistry,
)


def create_breaker(name: str, config: CircuitBreakerConfig) -> CircuitBreaker:
    return CircuitBreaker(
        name,
        failure_threshold=config.failure_threshold,
        reset_timeout_seconds=config.reset_timeout_seconds,
        half_open_max_calls=config.half_open_max_calls,
    )


def _create_cache(config: ResponseCacheConfig) -> TTLCache:  # type: ignore[type-arg]
    return TTLCache(max_entries=config.max_entries, ttl_seconds=config.ttl_seconds)


def create_extractor(
    config: ClaudeEntityExtractorConfig | NoOpEntityExtractorConfig,
) -> EntityExtractor:
    """Create an entity extractor from config.

    Uses explicit type matching rather than getattr.
    """
    if isinstance(config, ClaudeEntityExtractorConfig):
        cache: TTLCache[ExtractedEntities] = _create_cache(config.cache)
        return ClaudeEntityExtractor(
            model=config.model,
            max_chars=config.max_chars,
            timeout_seconds=config.timeout_seconds,
            max_retries=config.max_retries,
            breaker=create_breaker("anthropic:entities", config.breaker),
            cache=cache,
        )
    if isinstance(config, NoOpEntityExtractorConfig):
        return NoOpEntityExtractor()
    msg = f"Unknown extractor config type: {type(config)}"
    raise ValueError(msg)


def create_embedder(
    config: OpenAIEmbedderConfig | SentenceTransformerEmbedderConfig,
) -> TextEmbedder:
    """Create a text embedder from config."""
    if isinstance(config, OpenAIEmbedderConfig):
        cache: TTLCache[NDArray[np.float32]] = _create_cache(config.cache)
        return OpenAIEmbedder(
            model=config.model,
            base_url=config.base_url,
            timeout_seconds=config.timeout_seconds,
            max_retries=config.max_retries,
            breaker=create_breaker("openai:embeddings", config.breaker),
            cache=cache,
        )
    if isinstance(config, SentenceTransformerEmbedderConfig):
        return SentenceTransformerEmbedder(
            model_name=config.model_name,
            timeout_seconds=config.timeout_seconds,
            breaker=create_breaker(f"sentence_transformers:{config.model_name}", config.breaker),
            cache=_create_cache(config.cache),
        )
    msg = f"Unknown embedder config type: {type(config)}"
    raise ValueError(msg)


def create_scoring(
    config: SequentialScoringConfig | BoundedParallelScoringConfig,
) -> ScoringStrategy:
    """Create a candidate scoring strategy from config."""
    if isinstance(config, SequentialScoringConfig):
        return SequentialScoring()
    if isinstance(config, BoundedParallelScoringConfig):
        return BoundedParallelScoring(max_concurrency=config.max_concurrency)
    msg = f"Unknown scoring config type: {type(config)}"
    raise ValueError(msg)


def create_database(config: DatabaseConfig) -> Database:
    return Database(config.url, timeout_seconds=config.timeout_seconds, echo=config.echo)


def create_from_config(
    config: EngineConfig,
    *,
    database: Database | None = None,
    extractor: EntityExtractor | None = None,
    embedder: TextEmbedder | None = None,
) -> tuple[PerspectiveMatcher, BalancedFeedBuilder, Database]:
    """Create the matcher and feed builder from root config.

    Args:
        config: Root configuration.
        database: Use this database instead of creating one from config.
        extractor: Use this extractor instead of creating one from config.
        embedder: Use this embedder instead of creating one from config.

    Returns:
        Tuple of (matcher, feed_builder, database).
    """
    db = database or create_database(config.database)
    articles = SqlArticleStore(db)
    sources = SqlSourceRegistry(db)

    matcher_config = config.matcher
    matcher = PerspectiveMatcher(
        articles=articles,
        sources=sources,
        cache=SqlPerspectiveCache(db),
        extractor=extractor or create_extractor(config.extractor),
        semantic=SemanticScorer(
            embedder or create_embedder(config.embedder),
            max_chars=matcher_config.text_max_chars,
        ),
        scoring=create_scoring(matcher_config.scoring),
        defaults=matcher_config.to_options(),
        max_candidates=matcher_config.max_candidates,
        tie_margin=matcher_config.tie_margin,
        entity_weight=matcher_config.entity_weight,
        semantic_weight=matcher_config.semantic_weight,
        label_language=config.label_language,
    )
    feed_builder = BalancedFeedBuilder(
        articles,
        sources,
        scan_size=config.feed.scan_size,
        label_language=config.label_language,
    )
    return (matcher, feed_builder, db)
