"""Tests for the perspective matcher."""

from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from perspective_engine.analysis.noop import NoOpEntityExtractor
from perspective_engine.data import MatchOptions
from perspective_engine.errors import NotFoundError
from perspective_engine.matcher.perspectives import PerspectiveMatcher
from perspective_engine.matcher.scoring import BoundedParallelScoring
from perspective_engine.store.sql import (
    Database,
    SqlArticleStore,
    SqlPerspectiveCache,
    SqlSourceRegistry,
)
from tests.conftest import (
    BASE_TIME,
    FakeExtractor,
    FakeSemanticScorer,
    add_article,
    add_source,
    entities,
    set_alignment,
)

STORY = entities("Ada", "Parliament", "Ankara")


def _matcher(
    db: Database,
    extractor: object,
    semantic: object,
    **kwargs: object,
) -> PerspectiveMatcher:
    return PerspectiveMatcher(
        articles=SqlArticleStore(db),
        sources=SqlSourceRegistry(db),
        cache=SqlPerspectiveCache(db),
        extractor=extractor,  # type: ignore[arg-type]
        semantic=semantic,  # type: ignore[arg-type]
        **kwargs,  # type: ignore[arg-type]
    )


@pytest.fixture
async def newsroom(db: Database) -> Database:
    """Main article from a centrist outlet plus candidates from four others."""
    await add_source(db, "Center", 0, logo_url="https://center.example/logo.png")
    await add_source(db, "Gov", 4)
    await add_source(db, "Opp", -4)
    await add_source(db, "Mild", 1)
    await add_article(db, "main", "Center", BASE_TIME, title="Main story")
    await add_article(db, "gov", "Gov", BASE_TIME - timedelta(hours=2), title="Gov take")
    await add_article(db, "opp", "Opp", BASE_TIME - timedelta(hours=3), title="Opp take")
    await add_article(db, "mild", "Mild", BASE_TIME + timedelta(hours=1), title="Mild take")
    await add_article(db, "same", "Center", BASE_TIME - timedelta(hours=1), title="Same outlet")
    return db


def _story_extractor(*titles: str) -> FakeExtractor:
    return FakeExtractor({title: STORY for title in ("Main story", *titles)})


# -- Threshold semantics --


async def test_combined_threshold_boundary(newsroom: Database) -> None:
    # Entity overlap is 1.0 for both: 0.4 + 0.6 * 0.40 = 0.64, 0.4 + 0.6 * 0.45 = 0.67
    extractor = _story_extractor("Gov take", "Opp take")
    semantic = FakeSemanticScorer({"Gov take": 0.40, "Opp take": 0.45})
    matcher = _matcher(newsroom, extractor, semantic)

    result = await matcher.find_perspectives("main", "tr")

    assert [p.article_id for p in result.related_perspectives] == ["opp"]
    assert result.related_perspectives[0].similarity_score == pytest.approx(0.67)
    assert not result.from_cache


async def test_entity_gate_skips_semantic_call(newsroom: Database) -> None:
    extractor = FakeExtractor(
        {
            "Main story": STORY,
            # 1 shared of 4 pooled = 0.25 passes; 1 of 5 = 0.2 does not
            "Gov take": entities("Ada", "Budget"),
            "Opp take": entities("Ada", "Budget", "Izmir"),
        }
    )
    semantic = FakeSemanticScorer({"Gov take": 1.0, "Opp take": 1.0})
    matcher = _matcher(newsroom, extractor, semantic)

    result = await matcher.find_perspectives("main", "tr")

    compared = [b.split(". ", 1)[0] for _, b in semantic.calls]
    assert compared == ["Gov take"]
    assert [p.article_id for p in result.related_perspectives] == ["gov"]
    assert result.related_perspectives[0].matched_entities == ("Ada",)


async def test_same_outlet_is_never_a_perspective(newsroom: Database) -> None:
    extractor = _story_extractor("Gov take", "Opp take", "Mild take", "Same outlet")
    semantic = FakeSemanticScorer(
        {"Gov take": 0.9, "Opp take": 0.9, "Mild take": 0.9, "Same outlet": 1.0}
    )
    matcher = _matcher(newsroom, extractor, semantic)

    result = await matcher.find_perspectives("main", "tr")

    assert "same" not in {p.article_id for p in result.related_perspectives}
    assert all(p.source_name != "Center" for p in result.related_perspectives)
    # The same-outlet candidate is not even sent for extraction
    assert not any(text.startswith("Same outlet") for text in extractor.calls)


async def test_results_ranked_with_alignment_tie_break(newsroom: Database) -> None:
    extractor = _story_extractor("Gov take", "Opp take", "Mild take")
    semantic = FakeSemanticScorer({"Gov take": 0.80, "Opp take": 0.78, "Mild take": 0.82})
    matcher = _matcher(newsroom, extractor, semantic)

    result = await matcher.find_perspectives("main", "tr")

    # All within the tie margin; distances from Center (0): Gov 4, Opp 4, Mild 1
    assert [p.article_id for p in result.related_perspectives] == ["gov", "opp", "mild"]
    gov = result.related_perspectives[0]
    assert gov.alignment_score == 4
    assert gov.alignment_label == "Pro-Government"
    assert result.main_article.source_name == "Center"
    assert result.main_article.alignment_label == "Mixed / Center"


async def test_max_results_truncates(newsroom: Database) -> None:
    extractor = _story_extractor("Gov take", "Opp take", "Mild take")
    semantic = FakeSemanticScorer({"Gov take": 0.9, "Opp take": 0.9, "Mild take": 0.9})
    matcher = _matcher(newsroom, extractor, semantic)

    result = await matcher.find_perspectives("main", "tr", MatchOptions(max_results=2))

    assert len(result.related_perspectives) == 2


async def test_time_window_limits_candidates(newsroom: Database) -> None:
    extractor = _story_extractor("Gov take", "Opp take", "Mild take")
    semantic = FakeSemanticScorer({"Gov take": 0.9, "Opp take": 0.9, "Mild take": 0.9})
    matcher = _matcher(newsroom, extractor, semantic)

    result = await matcher.find_perspectives("main", "tr", MatchOptions(time_window_hours=1.5))

    assert [p.article_id for p in result.related_perspectives] == ["mild"]


# -- Cache --


async def test_repeat_call_served_from_cache_in_same_order(newsroom: Database) -> None:
    extractor = _story_extractor("Gov take", "Opp take", "Mild take")
    semantic = FakeSemanticScorer({"Gov take": 0.80, "Opp take": 0.78, "Mild take": 0.82})
    matcher = _matcher(newsroom, extractor, semantic)

    first = await matcher.find_perspectives("main", "tr")
    extract_calls = len(extractor.calls)
    second = await matcher.find_perspectives("main", "tr")

    assert second.from_cache
    assert len(extractor.calls) == extract_calls
    assert [p.article_id for p in second.related_perspectives] == [
        p.article_id for p in first.related_perspectives
    ]
    assert [p.similarity_score for p in second.related_perspectives] == pytest.approx(
        [p.similarity_score for p in first.related_perspectives]
    )


async def test_cached_results_use_live_alignment(newsroom: Database) -> None:
    extractor = _story_extractor("Gov take", "Opp take", "Mild take")
    semantic = FakeSemanticScorer({"Gov take": 0.80, "Opp take": 0.78, "Mild take": 0.82})
    matcher = _matcher(newsroom, extractor, semantic)

    first = await matcher.find_perspectives("main", "tr")
    await set_alignment(newsroom, "Gov", 0)
    second = await matcher.find_perspectives("main", "tr")

    # Order and scores are frozen at write time, labels are re-derived
    assert [p.article_id for p in second.related_perspectives] == [
        p.article_id for p in first.related_perspectives
    ]
    gov = next(p for p in second.related_perspectives if p.article_id == "gov")
    assert gov.alignment_score == 0
    assert gov.alignment_label == "Mixed / Center"


async def test_empty_result_is_not_cached(newsroom: Database) -> None:
    extractor = _story_extractor()
    semantic = FakeSemanticScorer({})
    matcher = _matcher(newsroom, extractor, semantic)

    first = await matcher.find_perspectives("main", "tr")
    second = await matcher.find_perspectives("main", "tr")

    assert first.related_perspectives == []
    assert not second.from_cache


async def test_cache_hit_skips_analysis(newsroom: Database) -> None:
    extractor = MagicMock()
    extractor.extract = AsyncMock()
    semantic = MagicMock()
    semantic.similarity = AsyncMock()
    matcher = _matcher(newsroom, _story_extractor("Opp take"), FakeSemanticScorer({"Opp take": 1.0}))
    await matcher.find_perspectives("main", "tr")

    cached_matcher = _matcher(newsroom, extractor, semantic)
    result = await cached_matcher.find_perspectives("main", "tr")

    assert result.from_cache
    assert [p.article_id for p in result.related_perspectives] == ["opp"]
    extractor.extract.assert_not_called()
    semantic.similarity.assert_not_called()


# -- Degraded and error paths --


async def test_noop_extractor_finds_nothing(newsroom: Database) -> None:
    semantic = FakeSemanticScorer({"Gov take": 1.0})
    matcher = _matcher(newsroom, NoOpEntityExtractor(), semantic)

    result = await matcher.find_perspectives("main", "tr")

    assert result.related_perspectives == []
    assert semantic.calls == []


async def test_missing_article_raises_not_found(newsroom: Database) -> None:
    matcher = _matcher(newsroom, _story_extractor(), FakeSemanticScorer({}))
    with pytest.raises(NotFoundError) as exc_info:
        await matcher.find_perspectives("nope", "tr")
    assert exc_info.value.article_id == "nope"


async def test_article_in_other_country_is_not_found(newsroom: Database) -> None:
    matcher = _matcher(newsroom, _story_extractor(), FakeSemanticScorer({}))
    with pytest.raises(NotFoundError):
        await matcher.find_perspectives("main", "de")


async def test_unsupported_country_raises_value_error(newsroom: Database) -> None:
    matcher = _matcher(newsroom, _story_extractor(), FakeSemanticScorer({}))
    with pytest.raises(ValueError, match="Unsupported country code"):
        await matcher.find_perspectives("main", "zz")


async def test_no_candidates_returns_main_view(db: Database) -> None:
    await add_source(db, "Center", 0)
    await add_article(db, "lonely", "Center", BASE_TIME, title="Lonely story")
    matcher = _matcher(db, _story_extractor(), FakeSemanticScorer({}))

    result = await matcher.find_perspectives("lonely", "tr")

    assert result.main_article.id == "lonely"
    assert result.related_perspectives == []


async def test_main_without_source_uses_defaults(db: Database) -> None:
    await add_source(db, "Opp", -4)
    await add_article(db, "main", None, BASE_TIME, title="Main story")
    await add_article(db, "opp", "Opp", BASE_TIME, title="Opp take")
    matcher = _matcher(db, _story_extractor("Opp take"), FakeSemanticScorer({"Opp take": 0.9}))

    result = await matcher.find_perspectives("main", "tr")

    assert result.main_article.source_name is None
    assert result.main_article.alignment_score == 0
    assert result.main_article.alignment_label == "Uncertain"
    assert [p.article_id for p in result.related_perspectives] == ["opp"]


async def test_candidate_without_source_is_skipped(newsroom: Database) -> None:
    await add_article(newsroom, "orphan", None, BASE_TIME, title="Orphan take")
    extractor = _story_extractor("Orphan take")
    semantic = FakeSemanticScorer({"Orphan take": 1.0})
    matcher = _matcher(newsroom, extractor, semantic)

    result = await matcher.find_perspectives("main", "tr")

    assert result.related_perspectives == []


async def test_parallel_scoring_matches_sequential(newsroom: Database) -> None:
    scores = {"Gov take": 0.80, "Opp take": 0.78, "Mild take": 0.82}
    matcher = _matcher(
        newsroom,
        _story_extractor(*scores),
        FakeSemanticScorer(scores),
        scoring=BoundedParallelScoring(max_concurrency=3),
    )

    result = await matcher.find_perspectives("main", "tr")

    assert [p.article_id for p in result.related_perspectives] == ["gov", "opp", "mild"]


async def test_combined_score_weights(db: Database) -> None:
    matcher = _matcher(db, NoOpEntityExtractor(), FakeSemanticScorer({}))
    assert matcher.combined_score(0.5, 0.5) == pytest.approx(0.5)
    assert matcher.combined_score(1.0, 0.0) == pytest.approx(0.4)
