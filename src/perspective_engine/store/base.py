"""Protocols for the storage collaborators consumed by the engine."""

from collections.abc import Sequence
from datetime import datetime
from typing import Protocol

from perspective_engine.data import Article, CountryCode, PerspectiveMatch, PrimarySource, Source


class ArticleStore(Protocol):
    """Read access to persisted articles, partitioned by country."""

    async def get_article_by_id(self, country: CountryCode, article_id: str) -> Article | None:
        """Load one article, suppressed or not."""
        ...

    async def list_articles_in_window(
        self,
        country: CountryCode,
        start: datetime,
        end: datetime,
        *,
        exclude_id: str | None = None,
        limit: int = 50,
    ) -> list[Article]:
        """Non-suppressed articles published in ``[start, end]``, newest first.

        Args:
            country: Country partition to search.
            start: Inclusive lower bound on publication time.
            end: Inclusive upper bound on publication time.
            exclude_id: Article id to leave out.
            limit: Maximum number of articles returned.
        """
        ...

    async def list_recent_articles(
        self,
        country: CountryCode,
        *,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Article]:
        """Non-suppressed articles, newest first."""
        ...

    async def get_primary_source(
        self, country: CountryCode, article_id: str
    ) -> PrimarySource | None:
        ...

    async def get_primary_sources(
        self, country: CountryCode, article_ids: Sequence[str]
    ) -> dict[str, PrimarySource]:
        """Primary sources keyed by article id; articles without one are absent."""
        ...


class SourceRegistry(Protocol):
    """Read access to outlets and their alignment ratings."""

    async def get_source_by_name(self, name: str) -> Source | None: ...

    async def get_sources_by_names(self, names: Sequence[str]) -> dict[str, Source]: ...

    async def list_active_sources(self, country: CountryCode) -> list[Source]: ...


class PerspectiveCacheStore(Protocol):
    """Durable write-once cache of scored (main, related) article pairs."""

    async def get_cached_matches(
        self, main_article_id: str, *, limit: int = 5
    ) -> list[PerspectiveMatch]:
        """Cached matches in ranked order (rank, then score descending)."""
        ...

    async def insert_if_absent(self, match: PerspectiveMatch) -> bool:
        """Cache a match unless the pair already exists.

        Returns:
            True if a row was inserted, False if the pair was already cached.
        """
        ...
