"""Circuit breaker guarding calls to the counseling backend.

States:
- CLOSED: normal operation, calls go through
- OPEN: backend considered down, calls fail immediately
- HALF_OPEN: reset timeout elapsed, one trial call is let through

Only transport failures and 5xx responses count as failures. A 4xx answer
means the backend is healthy and simply refused the request.
"""
import logging
import time
from enum import Enum
from typing import Callable, Optional

from counsel_booking.errors import CircuitOpenError

logger = logging.getLogger(__name__)


class CircuitState(Enum):
    """Circuit breaker states."""
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreaker:
    """Failure counter with fail-fast behavior for the backend client."""

    def __init__(
        self,
        failure_threshold: int = 5,
        reset_timeout: float = 60,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            failure_threshold: Consecutive failures before opening
            reset_timeout: Seconds the circuit stays open before a trial call
            clock: Monotonic time source (injectable for tests)
        """
        self.failure_threshold = failure_threshold
        self.reset_timeout = reset_timeout
        self._clock = clock
        self.failure_count = 0
        self.opened_at: Optional[float] = None
        self._state = CircuitState.CLOSED

    @property
    def state(self) -> str:
        """Current state as string."""
        return self._state.value

    def guard(self) -> None:
        """
        Check whether a call may proceed.

        Raises:
            CircuitOpenError: If the circuit is open and the reset timeout
                has not elapsed yet
        """
        if self._state != CircuitState.OPEN:
            return

        remaining = self.reset_timeout - (self._clock() - self.opened_at)
        if remaining <= 0:
            self._state = CircuitState.HALF_OPEN
            logger.info("Circuit breaker transitioning to HALF_OPEN")
            return

        raise CircuitOpenError(
            f"Backend temporarily unavailable. Retry after {remaining:.1f}s"
        )

    def record_success(self) -> None:
        self.failure_count = 0
        if self._state == CircuitState.HALF_OPEN:
            logger.info("Circuit breaker closed after successful trial call")
        self._state = CircuitState.CLOSED
        self.opened_at = None

    def record_failure(self) -> None:
        self.failure_count += 1

        if self._state == CircuitState.HALF_OPEN:
            self._open()
            logger.warning("Circuit breaker re-opened after failed trial call")
        elif self.failure_count >= self.failure_threshold:
            self._open()
            logger.error(
                "Circuit breaker opened after %d failures (reset in %ss)",
                self.failure_count,
                self.reset_timeout,
            )

    def _open(self) -> None:
        self._state = CircuitState.OPEN
        self.opened_at = self._clock()
