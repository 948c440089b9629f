"""Exponential backoff around classified transport calls."""

from __future__ import annotations

import logging
import random
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from chunkup.core.client import Outcome, TransportResult
from chunkup.core.exceptions import (
    AuthenticationError,
    RetryExhaustedError,
    UploadCancelledError,
)

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

DEFAULT_INITIAL_INTERVAL = 0.5
DEFAULT_MULTIPLIER = 1.5
DEFAULT_RANDOMIZATION_FACTOR = 0.5
DEFAULT_MAX_INTERVAL = 60.0
DEFAULT_MAX_ELAPSED_TIME = 15 * 60.0
DEFAULT_MAX_ATTEMPTS = 10


# =============================================================================
# RetryPolicy
# =============================================================================


@dataclass(frozen=True)
class RetryPolicy:
    """Exponential backoff schedule with attempt and elapsed-time budgets."""

    initial_interval: float = DEFAULT_INITIAL_INTERVAL
    multiplier: float = DEFAULT_MULTIPLIER
    randomization_factor: float = DEFAULT_RANDOMIZATION_FACTOR
    max_interval: float = DEFAULT_MAX_INTERVAL
    max_elapsed_time: float | None = DEFAULT_MAX_ELAPSED_TIME
    max_attempts: int | None = DEFAULT_MAX_ATTEMPTS

    def delay(self, retry_number: int) -> float:
        """Backoff before retry ``retry_number`` (1-based), jittered."""
        base = min(
            self.initial_interval * self.multiplier ** (retry_number - 1),
            self.max_interval,
        )
        if not self.randomization_factor:
            return base
        spread = base * self.randomization_factor
        return random.uniform(base - spread, base + spread)

    def exhausted(self, attempts: int, elapsed: float) -> bool:
        """Whether another attempt is out of budget."""
        if self.max_attempts is not None and attempts >= self.max_attempts:
            return True
        if self.max_elapsed_time is not None and elapsed >= self.max_elapsed_time:
            return True
        return False


# =============================================================================
# Retry Loop
# =============================================================================


def call_with_retry(
    attempt: Callable[[], TransportResult],
    *,
    operation: str,
    policy: RetryPolicy | None = None,
    cancel_event: threading.Event | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> TransportResult:
    """Call ``attempt`` until it succeeds, fails fatally, or runs out of budget.

    Args:
        attempt: Performs one request and returns its classified result.
            Called again on every retry, so it must be idempotent.
        operation: Name used in log messages and errors.
        policy: Backoff schedule (default: RetryPolicy()).
        cancel_event: When set, no further attempts are made.
        sleep: Sleep function for the backoff delay when no cancel event is
            given.

    Returns:
        The successful TransportResult.

    Raises:
        AuthenticationError: On a fatal-auth classification; never retried.
        RetryExhaustedError: If transient failures exhaust the budget.
        UploadCancelledError: If the cancel event is set.
    """
    policy = policy or RetryPolicy()
    start = time.monotonic()
    attempts = 0

    while True:
        if cancel_event is not None and cancel_event.is_set():
            raise UploadCancelledError(operation)

        result = attempt()
        attempts += 1

        if result.outcome is Outcome.SUCCESS:
            return result

        if result.outcome is Outcome.FATAL_AUTH:
            if isinstance(result.error, AuthenticationError):
                raise result.error
            raise AuthenticationError(reason=f"{operation}: HTTP {result.status_code}")

        if policy.exhausted(attempts, time.monotonic() - start):
            raise RetryExhaustedError(operation, attempts, result.error)

        delay = policy.delay(attempts)
        logger.warning(
            "%s: %s on attempt %d, retrying in %.2fs",
            operation,
            result.error,
            attempts,
            delay,
        )

        if cancel_event is not None:
            if cancel_event.wait(delay):
                raise UploadCancelledError(operation)
        else:
            sleep(delay)
