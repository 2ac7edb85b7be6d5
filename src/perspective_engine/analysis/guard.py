"""Timeout and circuit-breaker wrapper for calls to the text-analysis service."""

import asyncio
import hashlib
from collections.abc import Awaitable, Callable
from typing import TypeVar

from perspective_engine.analysis.breaker import CircuitBreaker
from perspective_engine.errors import DegradedSignalError

T = TypeVar("T")

DEFAULT_TIMEOUT_SECONDS = 8.0


async def guarded_call(
    call: Callable[[], Awaitable[T]],
    *,
    breaker: CircuitBreaker | None = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> T:
    """Run ``call`` under a timeout, recording the outcome on ``breaker``.

    Timeouts, SDK errors (rate limits, connection failures) and malformed
    responses all surface as ``DegradedSignalError``. Cancellation is not
    intercepted.

    Raises:
        DegradedSignalError: If the circuit is open or the call failed.
    """
    if breaker is not None and not breaker.allow():
        raise DegradedSignalError(f"Circuit {breaker.name} is open")

    try:
        result = await asyncio.wait_for(call(), timeout=timeout)
    except TimeoutError as e:
        if breaker is not None:
            breaker.record_failure()
        raise DegradedSignalError(f"Call timed out after {timeout:.1f}s") from e
    except Exception as e:
        if breaker is not None:
            breaker.record_failure()
        raise DegradedSignalError(f"{type(e).__name__}: {e}") from e

    if breaker is not None:
        breaker.record_success()
    return result


def cache_key(text: str) -> str:
    """Stable cache key for a (possibly long) text."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()
