"""Perspective matching: candidate selection, scoring, ranking and caching."""

from perspective_engine.matcher.candidates import CandidateSelector
from perspective_engine.matcher.perspectives import PerspectiveMatcher
from perspective_engine.matcher.ranker import ScoredCandidate, alignment_distance, rank_candidates
from perspective_engine.matcher.scoring import (
    BoundedParallelScoring,
    ScoringStrategy,
    SequentialScoring,
)

__all__ = [
    "BoundedParallelScoring",
    "CandidateSelector",
    "PerspectiveMatcher",
    "ScoredCandidate",
    "ScoringStrategy",
    "SequentialScoring",
    "alignment_distance",
    "rank_candidates",
]
