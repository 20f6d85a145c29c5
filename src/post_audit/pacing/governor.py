"""Adaptive pacing of provider calls.

The governor owns a single inter-call delay and tunes it from the signals
observed on each call:

    fast success   (latency < fast_response_ms)  -> delay - speed_up_ms
    slow success   (latency > slow_response_ms)  -> delay + slow_down_ms
    rate limited                                 -> delay * 2
    server error / timeout                       -> delay + slow_down_ms

The delay is clamped to [min_delay_ms, max_delay_ms] after every change.
"""

from __future__ import annotations

import asyncio
import logging

from post_audit.config import GovernorConfig, get_settings

logger = logging.getLogger(__name__)


async def sleep_unless_stopped(seconds: float, stop_event: asyncio.Event | None = None) -> bool:
    """Sleep for ``seconds`` unless ``stop_event`` is set first.

    Args:
        seconds: Duration to sleep
        stop_event: Optional event that interrupts the sleep when set

    Returns:
        True if the full duration elapsed, False if the sleep was interrupted
    """
    if stop_event is None:
        if seconds > 0:
            await asyncio.sleep(seconds)
        return True

    if stop_event.is_set():
        return False
    if seconds <= 0:
        return True

    try:
        await asyncio.wait_for(stop_event.wait(), timeout=seconds)
    except TimeoutError:
        return True
    return False


class PacingGovernor:
    """Learns the provider's tolerance from observed latency and errors.

    Usage:
        governor = PacingGovernor()

        # Before each call
        if not await governor.wait(stop_event):
            return  # cancelled

        # After each call
        governor.on_success(latency_ms)
    """

    def __init__(self, config: GovernorConfig | None = None) -> None:
        """Initialize the governor.

        Args:
            config: Optional governor configuration (uses settings if not provided)
        """
        self._config = config or get_settings().pacing
        self._current_delay_ms = self._config.initial_delay_ms
        self._successes = 0
        self._rate_limits = 0
        self._server_errors = 0

    @property
    def config(self) -> GovernorConfig:
        """Get the governor configuration."""
        return self._config

    @property
    def current_delay_ms(self) -> int:
        """Current inter-call delay in milliseconds."""
        return self._current_delay_ms

    @property
    def current_delay_seconds(self) -> float:
        """Current inter-call delay in seconds."""
        return self._current_delay_ms / 1000

    # -------------------------------------------------------------------------
    # Waiting
    # -------------------------------------------------------------------------
    async def wait(self, stop_event: asyncio.Event | None = None) -> bool:
        """Block for the current delay.

        Args:
            stop_event: Optional event that interrupts the wait when set

        Returns:
            True if the wait completed, False if it was interrupted
        """
        logger.debug("Waiting %d ms before next call", self._current_delay_ms)
        return await sleep_unless_stopped(self.current_delay_seconds, stop_event)

    # -------------------------------------------------------------------------
    # Feedback
    # -------------------------------------------------------------------------
    def on_success(self, latency_ms: float) -> None:
        """Adjust the delay after a successful call.

        Args:
            latency_ms: Observed latency of the call in milliseconds
        """
        self._successes += 1
        if latency_ms < self._config.fast_response_ms:
            self._set_delay(self._current_delay_ms - self._config.speed_up_ms)
        elif latency_ms > self._config.slow_response_ms:
            self._set_delay(self._current_delay_ms + self._config.slow_down_ms)
            logger.debug("Slow response (%.0f ms), delay now %d ms", latency_ms, self._current_delay_ms)

    def on_rate_limited(self) -> None:
        """Double the delay after an explicit rate-limit signal."""
        self._rate_limits += 1
        self._set_delay(self._current_delay_ms * 2)
        logger.warning("Rate limited by provider, delay now %d ms", self._current_delay_ms)

    def on_server_error(self) -> None:
        """Back off after a server-side failure or timeout."""
        self._server_errors += 1
        self._set_delay(self._current_delay_ms + self._config.slow_down_ms)
        logger.warning("Provider server error, delay now %d ms", self._current_delay_ms)

    def reset(self) -> None:
        """Restore the initial delay and clear counters."""
        self._current_delay_ms = self._config.initial_delay_ms
        self._successes = 0
        self._rate_limits = 0
        self._server_errors = 0

    def _set_delay(self, value_ms: int) -> None:
        self._current_delay_ms = max(self._config.min_delay_ms, min(value_ms, self._config.max_delay_ms))

    # -------------------------------------------------------------------------
    # Statistics
    # -------------------------------------------------------------------------
    def get_stats(self) -> dict[str, int]:
        """Get governor statistics for monitoring.

        Returns:
            Dict with current delay and signal counts
        """
        return {
            "current_delay_ms": self._current_delay_ms,
            "successes": self._successes,
            "rate_limited": self._rate_limits,
            "server_errors": self._server_errors,
        }
