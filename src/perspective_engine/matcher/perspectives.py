"""Perspective matcher: find coverage of the same story from other outlets."""

import logging
import time

from perspective_engine.alignment import LabelLanguage, source_alignment, source_label
from perspective_engine.analysis.base import EntityExtractor
from perspective_engine.data import (
    Article,
    CountryCode,
    ExtractedEntities,
    MainArticleView,
    MatchOptions,
    PerspectiveMatch,
    PerspectivesResult,
    PrimarySource,
    RelatedPerspective,
    Source,
)
from perspective_engine.errors import NotFoundError
from perspective_engine.matcher.candidates import DEFAULT_MAX_CANDIDATES, CandidateSelector
from perspective_engine.matcher.ranker import DEFAULT_TIE_MARGIN, ScoredCandidate, rank_candidates
from perspective_engine.matcher.scoring import ScoringStrategy, SequentialScoring
from perspective_engine.similarity import SemanticScorer, common_entities, entity_overlap
from perspective_engine.store.base import ArticleStore, PerspectiveCacheStore, SourceRegistry

logger = logging.getLogger(__name__)

ENTITY_WEIGHT = 0.4
SEMANTIC_WEIGHT = 0.6


class PerspectiveMatcher:
    """Find, score, rank and cache cross-outlet perspectives on an article.

    Flow:
    1. Load the main article (``NotFoundError`` if missing) and its source.
    2. Serve from the perspective cache when the article has cached matches.
    3. Otherwise select time-window candidates from other outlets.
    4. Score each candidate: entity overlap first, and only when it clears
       the entity threshold, semantic similarity.
    5. Keep candidates at or above the combined threshold, rank them, cache
       the top results and return them.

    Args:
        articles: Article store.
        sources: Source registry.
        cache: Perspective cache store.
        extractor: Named-entity extractor.
        semantic: Semantic similarity scorer.
        scoring: Candidate scoring strategy (sequential by default).
        defaults: Options used when a request passes none.
        max_candidates: Cap on candidates taken from the selector.
        tie_margin: Score gap treated as a tie when ranking.
        entity_weight: Weight of entity overlap in the combined score.
        semantic_weight: Weight of semantic similarity in the combined score.
        label_language: Language of alignment labels.
    """

    def __init__(
        self,
        articles: ArticleStore,
        sources: SourceRegistry,
        cache: PerspectiveCacheStore,
        extractor: EntityExtractor,
        semantic: SemanticScorer,
        *,
        scoring: ScoringStrategy | None = None,
        defaults: MatchOptions | None = None,
        max_candidates: int = DEFAULT_MAX_CANDIDATES,
        tie_margin: float = DEFAULT_TIE_MARGIN,
        entity_weight: float = ENTITY_WEIGHT,
        semantic_weight: float = SEMANTIC_WEIGHT,
        label_language: LabelLanguage = "en",
    ) -> None:
        self._articles = articles
        self._sources = sources
        self._cache = cache
        self._extractor = extractor
        self._semantic = semantic
        self._selector = CandidateSelector(articles)
        self._scoring = scoring or SequentialScoring()
        self._defaults = defaults or MatchOptions()
        self._max_candidates = max_candidates
        self._tie_margin = tie_margin
        self._entity_weight = entity_weight
        self._semantic_weight = semantic_weight
        self._label_language: LabelLanguage = label_language

    def combined_score(self, entity_score: float, semantic_score: float) -> float:
        return self._entity_weight * entity_score + self._semantic_weight * semantic_score

    async def find_perspectives(
        self,
        article_id: str,
        country: str | CountryCode,
        options: MatchOptions | None = None,
    ) -> PerspectivesResult:
        """Find perspectives on an article from other outlets.

        Args:
            article_id: Main article id.
            country: Country partition of the main article.
            options: Per-request tuning; the matcher defaults when omitted.

        Returns:
            The main article view and its ranked perspectives (possibly empty).

        Raises:
            NotFoundError: If the main article does not exist.
            StoreError: If a store is unavailable.
            ValueError: If the country is not supported.
        """
        country = CountryCode.parse(country)
        opts = options or self._defaults
        t0 = time.monotonic()

        main = await self._articles.get_article_by_id(country, article_id)
        if main is None:
            raise NotFoundError(article_id, country.value)

        main_source = await self._articles.get_primary_source(country, article_id)
        main_info = (
            await self._sources.get_source_by_name(main_source.source_name)
            if main_source is not None
            else None
        )
        main_view = self._main_view(main, main_source, main_info)

        cached = await self._cache.get_cached_matches(article_id, limit=opts.max_results)
        if cached:
            logger.debug("Perspective cache hit for %s (%d rows)", article_id, len(cached))
            related = await self._from_cache(country, cached)
            return PerspectivesResult(
                main_article=main_view,
                related_perspectives=related,
                from_cache=True,
            )

        candidates = await self._selector.select(
            main,
            window_hours=opts.time_window_hours,
            max_results=self._max_candidates,
        )
        if not candidates:
            logger.info("No candidates for %s in a %sh window", article_id, opts.time_window_hours)
            return PerspectivesResult(main_article=main_view)

        eligible = await self._eligible_candidates(country, candidates, main_source)
        if not eligible:
            logger.info("No candidates from other outlets for %s", article_id)
            return PerspectivesResult(main_article=main_view)

        main_entities = await self._extractor.extract(main.text)

        async def _score(pair: tuple[Article, PrimarySource, Source | None]) -> ScoredCandidate | None:
            article, source, info = pair
            return await self._score_candidate(main, main_entities, article, source, info, opts)

        scored = await self._scoring.run(eligible, _score)
        survivors = [s for s in scored if s is not None]

        main_alignment, _ = source_alignment(main_info)
        top = rank_candidates(survivors, main_alignment, self._tie_margin)[: opts.max_results]

        for rank, candidate in enumerate(top):
            await self._cache.insert_if_absent(
                PerspectiveMatch(
                    main_article_id=main.id,
                    related_article_id=candidate.article.id,
                    similarity_score=candidate.combined_score,
                    matched_entities=candidate.matched_entities,
                    rank=rank,
                )
            )

        logger.info(
            "Perspectives for %s: %d candidates, %d eligible, %d matched, %d returned (%.2fs)",
            article_id,
            len(candidates),
            len(eligible),
            len(survivors),
            len(top),
            time.monotonic() - t0,
        )

        return PerspectivesResult(
            main_article=main_view,
            related_perspectives=[self._perspective(c) for c in top],
        )

    async def _eligible_candidates(
        self,
        country: CountryCode,
        candidates: list[Article],
        main_source: PrimarySource | None,
    ) -> list[tuple[Article, PrimarySource, Source | None]]:
        """Pair candidates with their sources, dropping same-outlet and unattributed ones."""
        primaries = await self._articles.get_primary_sources(country, [c.id for c in candidates])
        infos = await self._sources.get_sources_by_names(
            sorted({p.source_name for p in primaries.values()})
        )

        eligible: list[tuple[Article, PrimarySource, Source | None]] = []
        for candidate in candidates:
            source = primaries.get(candidate.id)
            if source is None:
                continue
            if main_source is not None and source.source_name == main_source.source_name:
                continue
            eligible.append((candidate, source, infos.get(source.source_name)))
        return eligible

    async def _score_candidate(
        self,
        main: Article,
        main_entities: ExtractedEntities,
        candidate: Article,
        source: PrimarySource,
        info: Source | None,
        opts: MatchOptions,
    ) -> ScoredCandidate | None:
        candidate_entities = await self._extractor.extract(candidate.text)
        overlap = entity_overlap(main_entities, candidate_entities)
        if overlap < opts.entity_threshold:
            return None

        semantic = await self._semantic.similarity(main.text, candidate.text)
        combined = self.combined_score(overlap, semantic)
        if combined < opts.combined_threshold:
            return None

        return ScoredCandidate(
            article=candidate,
            source=source,
            source_info=info,
            entity_overlap=overlap,
            semantic_similarity=semantic,
            combined_score=combined,
            matched_entities=tuple(common_entities(main_entities, candidate_entities)),
        )

    async def _from_cache(
        self,
        country: CountryCode,
        cached: list[PerspectiveMatch],
    ) -> list[RelatedPerspective]:
        """Rebuild perspectives from cache rows, re-joining live article and source data."""
        related_ids = [m.related_article_id for m in cached]
        articles: dict[str, Article] = {}
        for related_id in related_ids:
            article = await self._articles.get_article_by_id(country, related_id)
            if article is not None:
                articles[related_id] = article
        primaries = await self._articles.get_primary_sources(country, related_ids)
        infos = await self._sources.get_sources_by_names(
            sorted({p.source_name for p in primaries.values()})
        )

        perspectives: list[RelatedPerspective] = []
        for match in cached:
            article = articles.get(match.related_article_id)
            source = primaries.get(match.related_article_id)
            if article is None or source is None:
                continue
            info = infos.get(source.source_name)
            score, _ = source_alignment(info)
            perspectives.append(
                RelatedPerspective(
                    article_id=article.id,
                    title=article.title,
                    summary=article.summary,
                    source_name=source.source_name,
                    source_logo_url=source.logo_url,
                    source_url=source.source_url,
                    alignment_score=score,
                    alignment_label=source_label(info, self._label_language),
                    published_at=article.published_at,
                    similarity_score=match.similarity_score,
                    matched_entities=match.matched_entities,
                )
            )
        return perspectives

    def _main_view(
        self,
        main: Article,
        source: PrimarySource | None,
        info: Source | None,
    ) -> MainArticleView:
        score, _ = source_alignment(info)
        return MainArticleView(
            id=main.id,
            title=main.title,
            summary=main.summary,
            source_name=source.source_name if source is not None else None,
            alignment_score=score,
            alignment_label=source_label(info, self._label_language),
        )

    def _perspective(self, candidate: ScoredCandidate) -> RelatedPerspective:
        score, _ = source_alignment(candidate.source_info)
        return RelatedPerspective(
            article_id=candidate.article.id,
            title=candidate.article.title,
            summary=candidate.article.summary,
            source_name=candidate.source.source_name,
            source_logo_url=candidate.source.logo_url,
            source_url=candidate.source.source_url,
            alignment_score=score,
            alignment_label=source_label(candidate.source_info, self._label_language),
            published_at=candidate.article.published_at,
            similarity_score=candidate.combined_score,
            matched_entities=candidate.matched_entities,
        )
