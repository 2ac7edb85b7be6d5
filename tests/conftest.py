"""Shared fixtures: in-memory database, seeding helpers and fake analysis clients."""

from collections.abc import AsyncIterator
from datetime import UTC, datetime

import pytest
from sqlalchemy import update

from perspective_engine.data import ExtractedEntities
from perspective_engine.store.sql import Database
from perspective_engine.store.tables import ArticleRow, ArticleSourceRow, SourceRow

BASE_TIME = datetime(2025, 3, 10, 12, 0, tzinfo=UTC)


@pytest.fixture
async def db() -> AsyncIterator[Database]:
    database = Database("sqlite+aiosqlite://")
    await database.init_schema()
    yield database
    await database.dispose()


async def add_source(
    db: Database,
    name: str,
    score: int = 0,
    *,
    confidence: float = 0.7,
    country: str = "tr",
    active: bool = True,
    logo_url: str = "",
) -> None:
    async with db.session() as session:
        session.add(
            SourceRow(
                country_code=country,
                source_name=name,
                source_logo_url=logo_url,
                is_active=active,
                alignment_score=score,
                alignment_confidence=confidence,
            )
        )


async def add_article(
    db: Database,
    article_id: str,
    source_name: str | None,
    published_at: datetime = BASE_TIME,
    *,
    title: str | None = None,
    summary: str = "",
    country: str = "tr",
    is_filtered: bool = False,
    source_url: str = "",
) -> None:
    async with db.session() as session:
        session.add(
            ArticleRow(
                id=article_id,
                country_code=country,
                original_title=title or article_id,
                translated_title=title or article_id,
                summary=summary,
                published_at=published_at,
                is_filtered=is_filtered,
            )
        )
        await session.flush()
        if source_name is not None:
            session.add(
                ArticleSourceRow(
                    article_id=article_id,
                    source_name=source_name,
                    source_url=source_url,
                    is_primary=True,
                )
            )


async def set_alignment(db: Database, name: str, score: int) -> None:
    async with db.session() as session:
        await session.execute(
            update(SourceRow).where(SourceRow.source_name == name).values(alignment_score=score)
        )


def entities(*names: str) -> ExtractedEntities:
    return ExtractedEntities(persons=tuple(names))


class FakeExtractor:
    """Extractor keyed on article title (the text before the first '. ')."""

    def __init__(self, by_title: dict[str, ExtractedEntities]) -> None:
        self._by_title = by_title
        self.calls: list[str] = []

    async def extract(self, text: str) -> ExtractedEntities:
        self.calls.append(text)
        title = text.split(". ", 1)[0]
        return self._by_title.get(title, ExtractedEntities.empty())


class FakeSemanticScorer:
    """Semantic scorer returning a fixed similarity per candidate title."""

    def __init__(self, by_title: dict[str, float]) -> None:
        self._by_title = by_title
        self.calls: list[tuple[str, str]] = []

    async def similarity(self, text_a: str, text_b: str) -> float:
        self.calls.append((text_a, text_b))
        return self._by_title.get(text_b.split(". ", 1)[0], 0.0)
