"""Similarity scoring between articles."""

from perspective_engine.similarity.entities import common_entities, entity_overlap
from perspective_engine.similarity.semantic import SemanticScorer, cosine_similarity

__all__ = [
    "SemanticScorer",
    "common_entities",
    "cosine_similarity",
    "entity_overlap",
]
