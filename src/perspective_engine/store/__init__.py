"""Article store, source registry and perspective cache."""

from perspective_engine.store.base import ArticleStore, PerspectiveCacheStore, SourceRegistry
from perspective_engine.store.sql import (
    DEFAULT_DATABASE_URL,
    Database,
    SqlArticleStore,
    SqlPerspectiveCache,
    SqlSourceRegistry,
)

__all__ = [
    "DEFAULT_DATABASE_URL",
    "ArticleStore",
    "Database",
    "PerspectiveCacheStore",
    "SourceRegistry",
    "SqlArticleStore",
    "SqlPerspectiveCache",
    "SqlSourceRegistry",
]
