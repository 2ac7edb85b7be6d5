"""Tests for the balanced feed builder."""

from datetime import timedelta

import pytest

from perspective_engine.data import AlignmentBucket
from perspective_engine.feed.balanced import BalancedFeedBuilder
from perspective_engine.store.sql import Database, SqlArticleStore, SqlSourceRegistry
from tests.conftest import BASE_TIME, add_article, add_source

SPECTRUM = {"Opp": -4, "Lean": -1, "Center": 0, "Gov": 3, "State": 5}


def _builder(db: Database, **kwargs: object) -> BalancedFeedBuilder:
    return BalancedFeedBuilder(SqlArticleStore(db), SqlSourceRegistry(db), **kwargs)  # type: ignore[arg-type]


@pytest.fixture
async def spectrum(db: Database) -> Database:
    """Four articles from each of five outlets, interleaved newest first."""
    for name, score in SPECTRUM.items():
        await add_source(db, name, score, logo_url=f"https://{name.lower()}.example/logo.png")
    minute = 0
    for j in range(4):
        for name in SPECTRUM:
            await add_article(
                db, f"{name}-{j}", name, BASE_TIME - timedelta(minutes=minute)
            )
            minute += 1
    return db


async def test_three_per_bucket_from_matching_sources(spectrum: Database) -> None:
    feed = await _builder(spectrum).get_balanced_feed("tr", limit=9)

    assert len(feed.pro_gov) == 3
    assert len(feed.mixed) == 3
    assert len(feed.anti_gov) == 3
    assert {a.source_name for a in feed.pro_gov} <= {"Gov", "State"}
    assert {a.source_name for a in feed.mixed} <= {"Lean", "Center"}
    assert {a.source_name for a in feed.anti_gov} == {"Opp"}


async def test_buckets_are_disjoint_and_newest_first(spectrum: Database) -> None:
    feed = await _builder(spectrum).get_balanced_feed("tr", limit=9)

    ids = [a.article.id for bucket in (feed.pro_gov, feed.mixed, feed.anti_gov) for a in bucket]
    assert len(ids) == len(set(ids))
    assert [a.article.id for a in feed.pro_gov] == ["Gov-0", "State-0", "Gov-1"]
    assert [a.article.id for a in feed.anti_gov] == ["Opp-0", "Opp-1", "Opp-2"]


async def test_feed_articles_carry_alignment(spectrum: Database) -> None:
    feed = await _builder(spectrum).get_balanced_feed("tr", limit=3)

    (gov,) = feed.pro_gov
    assert gov.source_name == "Gov"
    assert gov.alignment_score == 3
    assert gov.alignment_label == "Pro-Government"
    # No per-article logo, so the registry logo is used
    assert gov.source_logo_url == "https://gov.example/logo.png"


async def test_limit_rounds_up_per_bucket(spectrum: Database) -> None:
    feed = await _builder(spectrum).get_balanced_feed("tr", limit=4)
    assert len(feed.pro_gov) == 2
    assert len(feed.mixed) == 2
    assert len(feed.anti_gov) == 2


async def test_bucket_without_sources_stays_empty(db: Database) -> None:
    await add_source(db, "Gov", 3)
    await add_source(db, "Center", 0)
    await add_article(db, "g1", "Gov")
    await add_article(db, "c1", "Center", BASE_TIME - timedelta(minutes=1))

    feed = await _builder(db).get_balanced_feed("tr", limit=9)

    assert feed.anti_gov == []
    assert [a.article.id for a in feed.pro_gov] == ["g1"]
    assert [a.article.id for a in feed.mixed] == ["c1"]


async def test_inactive_and_unknown_sources_are_ignored(db: Database) -> None:
    await add_source(db, "Gov", 3)
    await add_source(db, "Closed", -5, active=False)
    await add_article(db, "closed", "Closed")
    await add_article(db, "unknown", "Blog")
    await add_article(db, "orphan", None)
    await add_article(db, "gov", "Gov", BASE_TIME - timedelta(minutes=1))

    feed = await _builder(db).get_balanced_feed("tr")

    assert feed.anti_gov == []
    assert feed.mixed == []
    assert [a.article.id for a in feed.pro_gov] == ["gov"]


async def test_no_active_sources_gives_empty_feed(db: Database) -> None:
    await add_article(db, "a1", "Gov")
    feed = await _builder(db).get_balanced_feed("tr")
    assert feed.pro_gov == feed.mixed == feed.anti_gov == []


async def test_pages_scan_successive_windows(spectrum: Database) -> None:
    builder = _builder(spectrum, scan_size=5)

    first = await builder.get_balanced_feed("tr", limit=9, page=1)
    second = await builder.get_balanced_feed("tr", limit=9, page=2)

    assert [a.article.id for a in first.anti_gov] == ["Opp-0"]
    assert [a.article.id for a in second.anti_gov] == ["Opp-1"]


async def test_turkish_labels(spectrum: Database) -> None:
    feed = await _builder(spectrum, label_language="tr").get_balanced_feed("tr", limit=3)
    assert feed.bucket(AlignmentBucket.ANTI_GOV)[0].alignment_label == "Muhalefete Yakın"


@pytest.mark.parametrize(("limit", "page"), [(0, 1), (5, 0)])
async def test_invalid_limit_or_page(db: Database, limit: int, page: int) -> None:
    with pytest.raises(ValueError):
        await _builder(db).get_balanced_feed("tr", limit=limit, page=page)


async def test_unsupported_country(db: Database) -> None:
    with pytest.raises(ValueError, match="Unsupported country code"):
        await _builder(db).get_balanced_feed("xx")
