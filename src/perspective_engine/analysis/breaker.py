"""Circuit breaker for the external text-analysis service."""

import logging
import time
from collections.abc import Callable
from enum import StrEnum

logger = logging.getLogger(__name__)


class CircuitState(StrEnum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreaker:
    """Stop calling a failing service until it has had time to recover.

    After ``failure_threshold`` consecutive failures the circuit opens and
    every call is refused. Once ``reset_timeout_seconds`` have passed it
    half-opens and lets up to ``half_open_max_calls`` probes through; one
    success closes it again, one failure reopens it.

    Args:
        name: Identifier used in log messages.
        failure_threshold: Consecutive failures before opening.
        reset_timeout_seconds: Time spent open before probing.
        half_open_max_calls: Probe calls allowed while half-open.
        clock: Monotonic time source (injectable for tests).
    """

    def __init__(
        self,
        name: str,
        failure_threshold: int = 5,
        reset_timeout_seconds: float = 60.0,
        half_open_max_calls: int = 3,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.name = name
        self._failure_threshold = failure_threshold
        self._reset_timeout = reset_timeout_seconds
        self._half_open_max_calls = half_open_max_calls
        self._clock = clock
        self._state = CircuitState.CLOSED
        self._failures = 0
        self._opened_at = 0.0
        self._half_open_calls = 0

    @property
    def state(self) -> CircuitState:
        return self._state

    def allow(self) -> bool:
        """Return whether a call may be attempted now."""
        if self._state is CircuitState.OPEN:
            if self._clock() - self._opened_at < self._reset_timeout:
                return False
            self._state = CircuitState.HALF_OPEN
            self._half_open_calls = 0
            logger.info("Circuit %s entering half-open state", self.name)

        if self._state is CircuitState.HALF_OPEN:
            if self._half_open_calls >= self._half_open_max_calls:
                return False
            self._half_open_calls += 1

        return True

    def record_success(self) -> None:
        if self._state is not CircuitState.CLOSED:
            logger.info("Circuit %s closed", self.name)
        self._state = CircuitState.CLOSED
        self._failures = 0

    def record_failure(self) -> None:
        self._failures += 1
        if self._state is CircuitState.HALF_OPEN or self._failures >= self._failure_threshold:
            if self._state is not CircuitState.OPEN:
                logger.warning(
                    "Circuit %s opened after %d failures", self.name, self._failures
                )
            self._state = CircuitState.OPEN
            self._opened_at = self._clock()
