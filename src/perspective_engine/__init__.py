"""Perspective Engine: related coverage of a news story from outlets across the political spectrum."""

from perspective_engine.alignment import (
    alignment_label,
    bucket_for_score,
    localize_label,
    source_alignment,
    source_label,
)
from perspective_engine.analysis.base import EntityExtractor, TextEmbedder
from perspective_engine.analysis.breaker import CircuitBreaker, CircuitState
from perspective_engine.analysis.claude import ClaudeEntityExtractor
from perspective_engine.analysis.embeddings import OpenAIEmbedder, SentenceTransformerEmbedder
from perspective_engine.analysis.noop import NoOpEntityExtractor
from perspective_engine.analysis.ttl_cache import TTLCache
from perspective_engine.config import EngineConfig, create_from_config, load_config
from perspective_engine.data import (
    AlignmentBucket,
    AlignmentLabel,
    Article,
    BalancedFeed,
    CountryCode,
    ExtractedEntities,
    FeedArticle,
    MainArticleView,
    MatchOptions,
    PerspectiveMatch,
    PerspectivesResult,
    PrimarySource,
    RelatedPerspective,
    Source,
)
from perspective_engine.errors import (
    CacheWriteConflict,
    DegradedSignalError,
    NotFoundError,
    PerspectiveEngineError,
    StoreError,
)
from perspective_engine.feed.balanced import BalancedFeedBuilder
from perspective_engine.matcher.candidates import CandidateSelector
from perspective_engine.matcher.perspectives import PerspectiveMatcher
from perspective_engine.matcher.ranker import rank_candidates
from perspective_engine.matcher.scoring import (
    BoundedParallelScoring,
    ScoringStrategy,
    SequentialScoring,
)
from perspective_engine.similarity.entities import common_entities, entity_overlap
from perspective_engine.similarity.semantic import SemanticScorer, cosine_similarity
from perspective_engine.store.base import ArticleStore, PerspectiveCacheStore, SourceRegistry
from perspective_engine.store.sql import (
    Database,
    SqlArticleStore,
    SqlPerspectiveCache,
    SqlSourceRegistry,
)

__all__ = [
    # Models
    "AlignmentBucket",
    "AlignmentLabel",
    "Article",
    "BalancedFeed",
    "CountryCode",
    "ExtractedEntities",
    "FeedArticle",
    "MainArticleView",
    "MatchOptions",
    "PerspectiveMatch",
    "PerspectivesResult",
    "PrimarySource",
    "RelatedPerspective",
    "Source",
    # Errors
    "CacheWriteConflict",
    "DegradedSignalError",
    "NotFoundError",
    "PerspectiveEngineError",
    "StoreError",
    # Functions
    "alignment_label",
    "bucket_for_score",
    "common_entities",
    "cosine_similarity",
    "entity_overlap",
    "localize_label",
    "rank_candidates",
    "source_alignment",
    "source_label",
    # Protocols
    "ArticleStore",
    "EntityExtractor",
    "PerspectiveCacheStore",
    "ScoringStrategy",
    "SourceRegistry",
    "TextEmbedder",
    # Text analysis
    "CircuitBreaker",
    "CircuitState",
    "ClaudeEntityExtractor",
    "NoOpEntityExtractor",
    "OpenAIEmbedder",
    "SemanticScorer",
    "SentenceTransformerEmbedder",
    "TTLCache",
    # Storage
    "Database",
    "SqlArticleStore",
    "SqlPerspectiveCache",
    "SqlSourceRegistry",
    # Matching
    "BoundedParallelScoring",
    "CandidateSelector",
    "PerspectiveMatcher",
    "SequentialScoring",
    # Feed
    "BalancedFeedBuilder",
    # Config
    "EngineConfig",
    "create_from_config",
    "load_config",
]
