"""Strategies for running per-candidate scoring.

The matcher hands each strategy an ordered list of items and an async
scoring function. Strategies return one result per item, in input order,
with ``None`` where scoring raised, so one failing candidate never cancels
or reorders the others.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Protocol, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

MAX_PARALLELISM = 5


class ScoringStrategy(Protocol):
    """Interface for executing candidate scoring."""

    @property
    def max_concurrency(self) -> int: ...

    async def run(
        self,
        items: Sequence[T],
        score: Callable[[T], Awaitable[R | None]],
    ) -> list[R | None]:
        """Score every item.

        Args:
            items: Items in their deterministic processing order.
            score: Async scoring function.

        Returns:
            One result per item in input order; ``None`` for dropped items.
        """
        ...


class SequentialScoring:
    """Score one candidate at a time (default; bounds external-service load)."""

    @property
    def max_concurrency(self) -> int:
        return 1

    async def run(
        self,
        items: Sequence[T],
        score: Callable[[T], Awaitable[R | None]],
    ) -> list[R | None]:
        results: list[R | None] = []
        for item in items:
            try:
                results.append(await score(item))
            except Exception:
                logger.warning("Scoring failed for %r, skipping", item, exc_info=True)
                results.append(None)
        return results


class BoundedParallelScoring:
    """Score candidates concurrently with a hard cap on in-flight candidates.

    Args:
        max_concurrency: Candidates scored at once (1 to 5).
    """

    def __init__(self, max_concurrency: int = 3) -> None:
        if not 1 <= max_concurrency <= MAX_PARALLELISM:
            msg = f"max_concurrency must be between 1 and {MAX_PARALLELISM}, got {max_concurrency}"
            raise ValueError(msg)
        self._max_concurrency = max_concurrency

    @property
    def max_concurrency(self) -> int:
        return self._max_concurrency

    async def run(
        self,
        items: Sequence[T],
        score: Callable[[T], Awaitable[R | None]],
    ) -> list[R | None]:
        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def _bounded(item: T) -> R | None:
            async with semaphore:
                return await score(item)

        outcomes = await asyncio.gather(*(_bounded(item) for item in items), return_exceptions=True)

        results: list[R | None] = []
        for item, outcome in zip(items, outcomes, strict=True):
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            if isinstance(outcome, BaseException):
                logger.warning("Scoring failed for %r, skipping: %s", item, outcome)
                results.append(None)
                continue
            results.append(outcome)
        return results
