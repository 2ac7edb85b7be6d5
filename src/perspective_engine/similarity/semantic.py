"""Semantic similarity between two texts via embedding cosine similarity."""

import asyncio
import logging

import numpy as np
from numpy.typing import NDArray

from perspective_engine.analysis.base import TextEmbedder
from perspective_engine.errors import DegradedSignalError

logger = logging.getLogger(__name__)

MAX_TEXT_CHARS = 2000


def cosine_similarity(a: NDArray[np.float32], b: NDArray[np.float32]) -> float:
    """Cosine similarity of two vectors, clamped to [-1, 1].

    Raises:
        DegradedSignalError: If the vectors differ in dimension.
    """
    if a.shape != b.shape:
        raise DegradedSignalError(f"Embedding dimensions differ: {a.shape} vs {b.shape}")
    norm = float(np.linalg.norm(a)) * float(np.linalg.norm(b))
    if norm == 0:
        return 0.0
    return max(-1.0, min(1.0, float(np.dot(a, b)) / norm))


class SemanticScorer:
    """Score semantic similarity of two texts with an embedding model.

    Each text is truncated to ``max_chars`` and embedded concurrently. Any
    embedding failure yields 0.0, meaning no semantic signal.

    Args:
        embedder: Embedding client.
        max_chars: Maximum characters embedded per text.
    """

    def __init__(self, embedder: TextEmbedder, max_chars: int = MAX_TEXT_CHARS) -> None:
        self._embedder = embedder
        self._max_chars = max_chars

    async def similarity(self, text_a: str, text_b: str) -> float:
        results = await asyncio.gather(
            self._embedder.embed(text_a[: self._max_chars]),
            self._embedder.embed(text_b[: self._max_chars]),
            return_exceptions=True,
        )

        vectors: list[NDArray[np.float32]] = []
        for result in results:
            if isinstance(result, asyncio.CancelledError):
                raise result
            if isinstance(result, BaseException):
                logger.warning("Semantic similarity failed, scoring 0: %s", result)
                return 0.0
            vectors.append(result)

        try:
            return cosine_similarity(vectors[0], vectors[1])
        except DegradedSignalError as e:
            logger.warning("Semantic similarity failed, scoring 0: %s", e)
            return 0.0
