"""Text embedding clients used for semantic similarity."""

import asyncio
import logging
import os

import httpx
import numpy as np
import openai
from numpy.typing import NDArray
from sentence_transformers import SentenceTransformer

from perspective_engine.analysis.breaker import CircuitBreaker
from perspective_engine.analysis.guard import DEFAULT_TIMEOUT_SECONDS, cache_key, guarded_call
from perspective_engine.analysis.ttl_cache import TTLCache
from perspective_engine.errors import DegradedSignalError

logger = logging.getLogger(__name__)


def _as_vector(values: object) -> NDArray[np.float32]:
    """Convert a raw embedding to a 1-D float32 vector.

    Raises:
        DegradedSignalError: If the embedding is empty or not one-dimensional.
    """
    vector = np.asarray(values, dtype=np.float32)
    if vector.ndim != 1 or vector.size == 0:
        raise DegradedSignalError(f"Malformed embedding with shape {vector.shape}")
    return vector


class OpenAIEmbedder:
    """Embeddings via the OpenAI embeddings API (or any compatible endpoint).

    Args:
        model: Embedding model name.
        api_key: API key (defaults to OPENAI_API_KEY env var).
        base_url: Optional OpenAI-compatible endpoint, e.g. OpenRouter.
        timeout_seconds: Deadline for a single embedding, retries included.
        max_retries: Retries performed by the SDK on transient errors.
        breaker: Circuit breaker shared by this embedder's calls.
        cache: Vector cache; a default one is created when omitted.
    """

    def __init__(
        self,
        model: str = "text-embedding-3-small",
        api_key: str | None = None,
        *,
        base_url: str | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        max_retries: int = 2,
        breaker: CircuitBreaker | None = None,
        cache: TTLCache[NDArray[np.float32]] | None = None,
    ) -> None:
        self._client = openai.AsyncOpenAI(
            api_key=api_key or os.environ.get("OPENAI_API_KEY"),
            base_url=base_url,
            timeout=httpx.Timeout(timeout_seconds),
            max_retries=max_retries,
        )
        self._model = model
        self._timeout = timeout_seconds
        self._breaker = breaker or CircuitBreaker("openai:embeddings")
        self._cache: TTLCache[NDArray[np.float32]] = cache or TTLCache()

    async def embed(self, text: str) -> NDArray[np.float32]:
        key = cache_key(text)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        vector = await guarded_call(
            lambda: self._request(text),
            breaker=self._breaker,
            timeout=self._timeout,
        )
        self._cache.set(key, vector)
        return vector

    async def _request(self, text: str) -> NDArray[np.float32]:
        response = await self._client.embeddings.create(model=self._model, input=text)
        if not response.data:
            raise DegradedSignalError("Embedding response contained no data")
        return _as_vector(response.data[0].embedding)


class SentenceTransformerEmbedder:
    """Embedder using a local sentence-transformers model.

    Encoding runs in a worker thread so it does not block the event loop.
    """

    def __init__(
        self,
        model_name: str = "all-MiniLM-L6-v2",
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        breaker: CircuitBreaker | None = None,
        cache: TTLCache[NDArray[np.float32]] | None = None,
    ) -> None:
        logger.info("Loading sentence-transformers model %s", model_name)
        self._model: SentenceTransformer = SentenceTransformer(model_name)
        self._timeout = timeout_seconds
        self._breaker = breaker or CircuitBreaker(f"sentence_transformers:{model_name}")
        self._cache: TTLCache[NDArray[np.float32]] = cache or TTLCache()

    async def embed(self, text: str) -> NDArray[np.float32]:
        key = cache_key(text)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        vector = await guarded_call(
            lambda: asyncio.to_thread(self._encode, text),
            breaker=self._breaker,
            timeout=self._timeout,
        )
        self._cache.set(key, vector)
        return vector

    def _encode(self, text: str) -> NDArray[np.float32]:
        return _as_vector(self._model.encode(text, convert_to_numpy=True))
