"""Process-wide circuit breaker for network fetches.

When the remote host is unreachable every uncached URL would otherwise pay
the full retry and backoff latency before failing. The breaker counts
consecutive network failures across all fetches; once ``threshold`` is
reached it opens and the Fetcher short-circuits for ``cooldown`` seconds.
After the cooldown it is half-open: exactly one trial request is let through,
every other caller is refused until that request's outcome either closes the
breaker or re-opens it for another cooldown.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from enum import Enum

logger = logging.getLogger(__name__)


class BreakerState(Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreaker:
    """Consecutive-failure circuit breaker.

    Every request admitted by :meth:`allow_request` must be settled with
    :meth:`record_success`, :meth:`record_failure` or
    :meth:`release_trial`.

    Args:
        threshold: Consecutive failures that open the breaker. Must be >= 1.
        cooldown: Seconds the breaker stays open before half-opening.
        clock: Monotonic clock, injectable for tests.
    """

    def __init__(
        self,
        threshold: int,
        cooldown: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if threshold < 1:
            raise ValueError(f"threshold must be at least 1, got {threshold}")
        self.threshold = threshold
        self.cooldown = cooldown
        self._clock = clock
        self.consecutive_failures = 0
        self._opened_at: float | None = None
        self._trial_in_flight = False

    @property
    def state(self) -> BreakerState:
        if self._opened_at is None:
            return BreakerState.CLOSED
        if self._clock() - self._opened_at >= self.cooldown:
            return BreakerState.HALF_OPEN
        return BreakerState.OPEN

    def retry_after(self) -> float:
        """Seconds until the breaker half-opens (0 when not open)."""
        if self._opened_at is None:
            return 0.0
        return max(0.0, self.cooldown - (self._clock() - self._opened_at))

    def allow_request(self) -> bool:
        """Return True if a network attempt may proceed.

        Closed admits everything and open admits nothing. Half-open admits a
        single trial request until it is settled.
        """
        state = self.state
        if state is BreakerState.CLOSED:
            return True
        if state is BreakerState.HALF_OPEN and not self._trial_in_flight:
            self._trial_in_flight = True
            return True
        return False

    def release_trial(self) -> None:
        """Give back an admitted trial request that ended with no outcome."""
        self._trial_in_flight = False

    def record_success(self) -> None:
        if self._opened_at is not None:
            logger.info("Circuit breaker closed after successful trial request")
        self.consecutive_failures = 0
        self._opened_at = None
        self._trial_in_flight = False

    def record_failure(self) -> None:
        self.consecutive_failures += 1
        self._trial_in_flight = False
        if self.state is BreakerState.HALF_OPEN:
            self._opened_at = self._clock()
            logger.warning(
                "Circuit breaker trial request failed, "
                f"re-opening for {self.cooldown:.1f}s"
            )
        elif (
            self._opened_at is None
            and self.consecutive_failures >= self.threshold
        ):
            self._opened_at = self._clock()
            logger.error(
                f"Circuit breaker opened after {self.consecutive_failures} "
                f"consecutive failures; pausing fetches for {self.cooldown:.1f}s"
            )
