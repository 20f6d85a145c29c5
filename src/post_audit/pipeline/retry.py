"""Retry policy for provider calls.

A pure decision function: given the kind of error and the attempt number,
either retry after a back-off or give up. Only transient errors are
retried; permanent errors give up on the first attempt.

    delay(attempt) = initial_delay * multiplier ** (attempt - 1)

capped at ``max_delay_seconds`` and optionally jittered.
"""

from __future__ import annotations

import random
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

from post_audit.config import RetryConfig, get_settings
from post_audit.provider.exceptions import (
    ProviderRateLimitError,
    ProviderTimeoutError,
    TransientProviderError,
)


class ErrorKind(StrEnum):
    """Classification of a failed evaluator call."""

    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    TIMEOUT = "timeout"
    PERMANENT = "permanent"

    @property
    def is_transient(self) -> bool:
        """Whether errors of this kind may succeed on retry."""
        return self is not ErrorKind.PERMANENT


def classify_error(error: BaseException) -> ErrorKind:
    """Map an exception raised by the evaluator to an ErrorKind.

    Anything that is not a transient provider error is permanent.
    """
    if isinstance(error, ProviderRateLimitError):
        return ErrorKind.RATE_LIMITED
    if isinstance(error, ProviderTimeoutError):
        return ErrorKind.TIMEOUT
    if isinstance(error, TransientProviderError):
        # Server and connection failures back off the same way
        return ErrorKind.SERVER_ERROR
    return ErrorKind.PERMANENT


@dataclass(frozen=True)
class RetryDecision:
    """Outcome of a retry decision."""

    retry: bool
    delay_seconds: float = 0.0

    @classmethod
    def give_up(cls) -> RetryDecision:
        return cls(retry=False)

    @classmethod
    def retry_after(cls, delay_seconds: float) -> RetryDecision:
        return cls(retry=True, delay_seconds=delay_seconds)


class RetryPolicy:
    """Exponential back-off for transient provider errors.

    Usage:
        policy = RetryPolicy()
        decision = policy.decide(ErrorKind.SERVER_ERROR, attempt=1)
        if decision.retry:
            await asyncio.sleep(decision.delay_seconds)
    """

    def __init__(
        self,
        config: RetryConfig | None = None,
        *,
        rng: Callable[[], float] = random.random,
    ) -> None:
        """Initialize the policy.

        Args:
            config: Optional retry configuration (uses settings if not provided)
            rng: Returns a float in [0, 1), injectable for deterministic jitter
        """
        self._config = config or get_settings().retry
        self._rng = rng

    @property
    def config(self) -> RetryConfig:
        """Get the retry configuration."""
        return self._config

    @property
    def max_attempts(self) -> int:
        """Attempts per item, including the first."""
        return self._config.max_attempts

    def backoff(self, attempt: int) -> float:
        """Un-jittered delay after the given failed attempt (1-based)."""
        delay = self._config.initial_delay_seconds * self._config.multiplier ** (attempt - 1)
        return min(delay, self._config.max_delay_seconds)

    def decide(
        self,
        kind: ErrorKind,
        attempt: int,
        retry_after: float | None = None,
    ) -> RetryDecision:
        """Decide whether to retry after a failed attempt.

        Args:
            kind: Classification of the error
            attempt: 1-based number of the attempt that just failed
            retry_after: Minimum delay requested by the provider, if any

        Returns:
            RetryDecision to retry after a delay or give up
        """
        if not kind.is_transient or attempt >= self._config.max_attempts:
            return RetryDecision.give_up()

        delay = self.backoff(attempt)
        jitter = self._config.jitter_ratio
        if jitter > 0:
            delay *= 1 + jitter * (2 * self._rng() - 1)
        if retry_after is not None:
            delay = max(delay, min(retry_after, self._config.max_delay_seconds))
        return RetryDecision.retry_after(max(0.0, delay))
