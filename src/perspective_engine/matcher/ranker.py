"""Relevance ranking with an alignment-diversity tie-break.

Candidates are ordered by combined score, descending. Scores are grouped
into bands: a band starts at the highest remaining score and takes every
candidate within ``tie_margin`` of it, so all members of a band are within
the margin of each other. Inside a band, candidates whose source alignment is
furthest from the main article's come first, which works against surfacing
only outlets editorially close to the main source.
"""

from dataclasses import dataclass

from perspective_engine.alignment import source_alignment
from perspective_engine.data import Article, PrimarySource, Source

DEFAULT_TIE_MARGIN = 0.1

# Float slack so that a gap of exactly the margin counts as a tie
_EPSILON = 1e-9


@dataclass(frozen=True)
class ScoredCandidate:
    """A candidate article that cleared the combined threshold."""

    article: Article
    source: PrimarySource
    source_info: Source | None
    entity_overlap: float
    semantic_similarity: float
    combined_score: float
    matched_entities: tuple[str, ...] = ()


def alignment_distance(candidate: ScoredCandidate, main_alignment: int) -> int:
    score, _ = source_alignment(candidate.source_info)
    return abs(score - main_alignment)


def rank_candidates(
    candidates: list[ScoredCandidate],
    main_alignment: int,
    tie_margin: float = DEFAULT_TIE_MARGIN,
) -> list[ScoredCandidate]:
    """Rank candidates by score, breaking near-ties by alignment diversity.

    Ordering is deterministic: candidates equal on both keys keep their
    input order.

    Args:
        candidates: Scored candidates in selector order.
        main_alignment: Alignment score of the main article's source.
        tie_margin: Score difference within which candidates are tied.

    Returns:
        Candidates in ranked order.
    """
    remaining = sorted(candidates, key=lambda c: c.combined_score, reverse=True)
    ranked: list[ScoredCandidate] = []

    while remaining:
        head = remaining[0].combined_score
        band = [c for c in remaining if head - c.combined_score <= tie_margin + _EPSILON]
        remaining = remaining[len(band) :]
        band.sort(
            key=lambda c: (alignment_distance(c, main_alignment), c.combined_score),
            reverse=True,
        )
        ranked.extend(band)

    return ranked
