"""Claude-based named-entity extractor using structured JSON output."""

import json
import logging
import os

import anthropic
import httpx

from perspective_engine.analysis.breaker import CircuitBreaker
from perspective_engine.analysis.guard import DEFAULT_TIMEOUT_SECONDS, cache_key, guarded_call
from perspective_engine.analysis.ttl_cache import TTLCache
from perspective_engine.data import ExtractedEntities
from perspective_engine.errors import DegradedSignalError

logger = logging.getLogger(__name__)

MAX_TEXT_CHARS = 1500

SYSTEM_PROMPT = """\
You are a named entity extraction system for news text. Respond ONLY with a \
JSON object (no markdown fences, no commentary) with these four arrays of \
strings:
- "persons": names of people mentioned
- "organizations": organizations, companies, institutions, political parties
- "locations": cities, regions, countries, places
- "events": specific named events or incidents

Use the surface form that appears in the text. Use an empty array when a \
category has no entities.\
"""

_CATEGORIES = ("persons", "organizations", "locations", "events")


def _string_list(raw: object) -> tuple[str, ...]:
    """Keep non-empty strings from a JSON array, de-duplicated in order."""
    if not isinstance(raw, list):
        return ()
    seen: set[str] = set()
    values: list[str] = []
    for item in raw:
        if not isinstance(item, str):
            continue
        value = item.strip()
        if value and value not in seen:
            seen.add(value)
            values.append(value)
    return tuple(values)


def _parse_entities(text: str) -> ExtractedEntities:
    """Parse Claude's JSON response into entities.

    Raises:
        DegradedSignalError: If the response is not a JSON object.
    """
    cleaned = text.strip()
    if cleaned.startswith("```"):
        lines = [line for line in cleaned.split("\n") if not line.strip().startswith("```")]
        cleaned = "\n".join(lines)

    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise DegradedSignalError(f"Entity response is not valid JSON: {e}") from e

    if not isinstance(parsed, dict):
        raise DegradedSignalError("Entity response is not a JSON object")

    persons, organizations, locations, events = (_string_list(parsed.get(c)) for c in _CATEGORIES)
    return ExtractedEntities(
        persons=persons,
        organizations=organizations,
        locations=locations,
        events=events,
    )


class ClaudeEntityExtractor:
    """Extract named entities from article text using Claude.

    Text is truncated to ``max_chars`` before submission. Responses are
    memoised per text in a bounded TTL cache. Any failure degrades to empty
    entity sets.

    Args:
        model: Anthropic model to use.
        api_key: API key (defaults to CLAUDE_API_KEY, then ANTHROPIC_API_KEY).
        max_chars: Maximum characters submitted per text.
        timeout_seconds: Deadline for a single extraction, retries included.
        max_retries: Retries performed by the SDK on transient errors.
        breaker: Circuit breaker shared by this extractor's calls.
        cache: Response cache; a default one is created when omitted.
    """

    def __init__(
        self,
        model: str = "claude-haiku-4-5-20251001",
        api_key: str | None = None,
        *,
        max_chars: int = MAX_TEXT_CHARS,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        max_retries: int = 2,
        breaker: CircuitBreaker | None = None,
        cache: TTLCache[ExtractedEntities] | None = None,
    ) -> None:
        resolved_key = api_key or os.environ.get("CLAUDE_API_KEY")
        self._client = anthropic.AsyncAnthropic(
            api_key=resolved_key,
            timeout=httpx.Timeout(timeout_seconds),
            max_retries=max_retries,
        )
        self._model = model
        self._max_chars = max_chars
        self._timeout = timeout_seconds
        self._breaker = breaker or CircuitBreaker("anthropic:entities")
        self._cache: TTLCache[ExtractedEntities] = cache or TTLCache()

    async def extract(self, text: str) -> ExtractedEntities:
        """Extract entities, returning empty sets when the service fails."""
        truncated = text[: self._max_chars]
        if not truncated.strip():
            return ExtractedEntities.empty()

        key = cache_key(truncated)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        try:
            entities = await guarded_call(
                lambda: self._request(truncated),
                breaker=self._breaker,
                timeout=self._timeout,
            )
        except DegradedSignalError as e:
            logger.warning("Entity extraction failed, using empty entities: %s", e)
            return ExtractedEntities.empty()

        self._cache.set(key, entities)
        return entities

    async def _request(self, text: str) -> ExtractedEntities:
        response = await self._client.messages.create(
            model=self._model,
            max_tokens=1024,
            temperature=0.2,
            system=SYSTEM_PROMPT,
            messages=[{"role": "user", "content": f"Text: {text}"}],
        )

        response_text = ""
        for block in response.content:
            if hasattr(block, "text"):
                response_text += block.text

        return _parse_entities(response_text)
