"""Data models for the perspective engine."""

from perspective_engine.data.models import (
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

__all__ = [
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
]
