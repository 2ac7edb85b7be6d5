"""Clients for the external text-analysis service."""

from perspective_engine.analysis.base import EntityExtractor, TextEmbedder
from perspective_engine.analysis.breaker import CircuitBreaker, CircuitState
from perspective_engine.analysis.claude import ClaudeEntityExtractor
from perspective_engine.analysis.embeddings import OpenAIEmbedder, SentenceTransformerEmbedder
from perspective_engine.analysis.guard import guarded_call
from perspective_engine.analysis.noop import NoOpEntityExtractor
from perspective_engine.analysis.ttl_cache import TTLCache

__all__ = [
    "CircuitBreaker",
    "CircuitState",
    "ClaudeEntityExtractor",
    "EntityExtractor",
    "NoOpEntityExtractor",
    "OpenAIEmbedder",
    "SentenceTransformerEmbedder",
    "TTLCache",
    "TextEmbedder",
    "guarded_call",
]
