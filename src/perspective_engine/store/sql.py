"""SQLAlchemy (asyncio) implementations of the store protocols."""

import asyncio
import logging
import uuid
from collections.abc import AsyncIterator, Awaitable, Callable, Sequence
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, TypeVar

from sqlalchemy import Insert, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from perspective_engine.data import Article, CountryCode, PerspectiveMatch, PrimarySource, Source
from perspective_engine.errors import CacheWriteConflict, StoreError
from perspective_engine.store.tables import (
    ArticleRow,
    ArticleSourceRow,
    Base,
    PerspectiveRow,
    SourceRow,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///perspectives.db"


def _is_in_memory_sqlite(url: str) -> bool:
    return url.startswith("sqlite") and (url.endswith("://") or ":memory:" in url)


class Database:
    """Async engine and session management.

    Every store operation runs through :meth:`run`, which applies a per-call
    timeout and converts database failures into ``StoreError``.

    Args:
        url: SQLAlchemy async database URL.
        timeout_seconds: Deadline for a single store operation.
        echo: Log emitted SQL.
    """

    def __init__(
        self,
        url: str = DEFAULT_DATABASE_URL,
        *,
        timeout_seconds: float = 10.0,
        echo: bool = False,
    ) -> None:
        engine_kwargs: dict[str, Any] = {"echo": echo}
        if _is_in_memory_sqlite(url):
            # One shared connection, otherwise each checkout sees an empty database
            engine_kwargs["poolclass"] = StaticPool
            engine_kwargs["connect_args"] = {"check_same_thread": False}
        self.engine = create_async_engine(url, **engine_kwargs)
        self._sessionmaker = async_sessionmaker(self.engine, expire_on_commit=False)
        self._timeout = timeout_seconds

    @property
    def dialect_name(self) -> str:
        return self.engine.dialect.name

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Transactional session: commits on success, rolls back on error."""
        async with self._sessionmaker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def run(self, operation: Callable[[AsyncSession], Awaitable[T]]) -> T:
        """Run ``operation`` in a session under the store timeout.

        Raises:
            StoreError: If the database fails or the deadline passes.
        """

        async def _execute() -> T:
            async with self.session() as session:
                return await operation(session)

        try:
            return await asyncio.wait_for(_execute(), timeout=self._timeout)
        except TimeoutError as e:
            raise StoreError(f"Store operation timed out after {self._timeout:.1f}s") from e
        except SQLAlchemyError as e:
            raise StoreError(f"Store operation failed: {e}") from e

    async def init_schema(self) -> None:
        """Create all tables that do not exist yet."""
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as e:
            raise StoreError(f"Schema initialization failed: {e}") from e
        logger.info("Schema initialized (%s)", self.dialect_name)

    async def dispose(self) -> None:
        await self.engine.dispose()


def _to_article(row: ArticleRow) -> Article:
    return Article(
        id=row.id,
        country=CountryCode(row.country_code),
        title=row.translated_title,
        summary=row.summary,
        published_at=row.published_at,
        is_filtered=row.is_filtered,
    )


def _to_primary_source(row: ArticleSourceRow) -> PrimarySource:
    return PrimarySource(
        article_id=row.article_id,
        source_name=row.source_name,
        logo_url=row.source_logo_url,
        source_url=row.source_url,
    )


def _to_source(row: SourceRow) -> Source:
    return Source(
        id=row.id,
        name=row.source_name,
        country=CountryCode(row.country_code),
        alignment_score=row.alignment_score,
        alignment_confidence=row.alignment_confidence,
        alignment_label=row.alignment_label,
        alignment_notes=row.alignment_notes,
        logo_url=row.source_logo_url,
        is_active=row.is_active,
    )


def _to_match(row: PerspectiveRow) -> PerspectiveMatch:
    return PerspectiveMatch(
        main_article_id=row.main_article_id,
        related_article_id=row.related_article_id,
        similarity_score=row.similarity_score,
        matched_entities=tuple(row.matched_entities or ()),
        rank=row.rank,
        created_at=row.created_at,
    )


class SqlArticleStore:
    """Article store over the ``articles`` and ``article_sources`` tables."""

    def __init__(self, db: Database) -> None:
        self._db = db

    async def get_article_by_id(self, country: CountryCode, article_id: str) -> Article | None:
        async def _query(session: AsyncSession) -> Article | None:
            stmt = select(ArticleRow).where(
                ArticleRow.id == article_id,
                ArticleRow.country_code == country.value,
            )
            row = (await session.execute(stmt)).scalar_one_or_none()
            return _to_article(row) if row is not None else None

        return await self._db.run(_query)

    async def list_articles_in_window(
        self,
        country: CountryCode,
        start: datetime,
        end: datetime,
        *,
        exclude_id: str | None = None,
        limit: int = 50,
    ) -> list[Article]:
        async def _query(session: AsyncSession) -> list[Article]:
            stmt = select(ArticleRow).where(
                ArticleRow.country_code == country.value,
                ArticleRow.is_filtered.is_(False),
                ArticleRow.published_at >= start,
                ArticleRow.published_at <= end,
            )
            if exclude_id is not None:
                stmt = stmt.where(ArticleRow.id != exclude_id)
            stmt = stmt.order_by(ArticleRow.published_at.desc(), ArticleRow.id).limit(limit)
            rows = (await session.execute(stmt)).scalars().all()
            return [_to_article(r) for r in rows]

        return await self._db.run(_query)

    async def list_recent_articles(
        self,
        country: CountryCode,
        *,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Article]:
        async def _query(session: AsyncSession) -> list[Article]:
            stmt = (
                select(ArticleRow)
                .where(
                    ArticleRow.country_code == country.value,
                    ArticleRow.is_filtered.is_(False),
                )
                .order_by(ArticleRow.published_at.desc(), ArticleRow.id)
                .offset(offset)
                .limit(limit)
            )
            rows = (await session.execute(stmt)).scalars().all()
            return [_to_article(r) for r in rows]

        return await self._db.run(_query)

    async def get_primary_source(
        self, country: CountryCode, article_id: str
    ) -> PrimarySource | None:
        sources = await self.get_primary_sources(country, [article_id])
        return sources.get(article_id)

    async def get_primary_sources(
        self, country: CountryCode, article_ids: Sequence[str]
    ) -> dict[str, PrimarySource]:
        if not article_ids:
            return {}

        async def _query(session: AsyncSession) -> dict[str, PrimarySource]:
            stmt = (
                select(ArticleSourceRow)
                .join(ArticleRow, ArticleRow.id == ArticleSourceRow.article_id)
                .where(
                    ArticleRow.country_code == country.value,
                    ArticleSourceRow.article_id.in_(list(article_ids)),
                    ArticleSourceRow.is_primary.is_(True),
                )
                .order_by(ArticleSourceRow.id)
            )
            rows = (await session.execute(stmt)).scalars().all()
            result: dict[str, PrimarySource] = {}
            for row in rows:
                # First primary row wins if an article has several
                result.setdefault(row.article_id, _to_primary_source(row))
            return result

        return await self._db.run(_query)


class SqlSourceRegistry:
    """Source registry over the ``sources`` table."""

    def __init__(self, db: Database) -> None:
        self._db = db

    async def get_source_by_name(self, name: str) -> Source | None:
        sources = await self.get_sources_by_names([name])
        return sources.get(name)

    async def get_sources_by_names(self, names: Sequence[str]) -> dict[str, Source]:
        if not names:
            return {}

        async def _query(session: AsyncSession) -> dict[str, Source]:
            stmt = (
                select(SourceRow)
                .where(SourceRow.source_name.in_(list(set(names))))
                .order_by(SourceRow.id)
            )
            rows = (await session.execute(stmt)).scalars().all()
            result: dict[str, Source] = {}
            for row in rows:
                result.setdefault(row.source_name, _to_source(row))
            return result

        return await self._db.run(_query)

    async def list_active_sources(self, country: CountryCode) -> list[Source]:
        async def _query(session: AsyncSession) -> list[Source]:
            stmt = (
                select(SourceRow)
                .where(
                    SourceRow.country_code == country.value,
                    SourceRow.is_active.is_(True),
                )
                .order_by(SourceRow.id)
            )
            rows = (await session.execute(stmt)).scalars().all()
            return [_to_source(r) for r in rows]

        return await self._db.run(_query)


class SqlPerspectiveCache:
    """Write-once perspective cache over the ``article_perspectives`` table.

    Inserts use ``ON CONFLICT DO NOTHING`` on SQLite and PostgreSQL. Other
    backends insert inside a savepoint and treat a unique-constraint
    violation as an already-cached pair.
    """

    def __init__(self, db: Database) -> None:
        self._db = db

    async def get_cached_matches(
        self, main_article_id: str, *, limit: int = 5
    ) -> list[PerspectiveMatch]:
        async def _query(session: AsyncSession) -> list[PerspectiveMatch]:
            stmt = (
                select(PerspectiveRow)
                .where(PerspectiveRow.main_article_id == main_article_id)
                .order_by(PerspectiveRow.rank, PerspectiveRow.similarity_score.desc())
                .limit(limit)
            )
            rows = (await session.execute(stmt)).scalars().all()
            return [_to_match(r) for r in rows]

        return await self._db.run(_query)

    async def insert_if_absent(self, match: PerspectiveMatch) -> bool:
        values: dict[str, Any] = {
            "id": str(uuid.uuid4()),
            "main_article_id": match.main_article_id,
            "related_article_id": match.related_article_id,
            "similarity_score": match.similarity_score,
            "matched_entities": list(match.matched_entities),
            "rank": match.rank,
        }
        if match.created_at is not None:
            values["created_at"] = match.created_at

        stmt = self._upsert_statement(values)
        if stmt is not None:

            async def _upsert(session: AsyncSession) -> bool:
                result = await session.execute(stmt)
                return bool(result.rowcount)

            return await self._db.run(_upsert)

        async def _insert(session: AsyncSession) -> bool:
            try:
                async with session.begin_nested():
                    session.add(PerspectiveRow(**values))
                    try:
                        await session.flush()
                    except IntegrityError as e:
                        raise CacheWriteConflict(
                            f"{match.main_article_id} -> {match.related_article_id}"
                        ) from e
            except CacheWriteConflict as e:
                logger.debug("Perspective pair already cached: %s", e)
                return False
            return True

        return await self._db.run(_insert)

    def _upsert_statement(self, values: dict[str, Any]) -> Insert | None:
        index_elements = ["main_article_id", "related_article_id"]
        if self._db.dialect_name == "sqlite":
            return (
                sqlite.insert(PerspectiveRow)
                .values(**values)
                .on_conflict_do_nothing(index_elements=index_elements)
            )
        if self._db.dialect_name == "postgresql":
            return (
                postgresql.insert(PerspectiveRow)
                .values(**values)
                .on_conflict_do_nothing(index_elements=index_elements)
            )
        return None
