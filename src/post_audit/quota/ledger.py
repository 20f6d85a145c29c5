"""Persisted daily quota ledger.

Tracks how many provider requests were issued on the current provider day
and stops short of the provider's hard daily limit by a safety margin.

The provider resets its counter at midnight in its own timezone, so the
ledger anchors every date computation there, independent of the host's
local timezone. Day rollover is detected lazily on each access: a process
idle across midnight resets on its next call.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from datetime import UTC, date, datetime, timedelta
from enum import StrEnum
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo

from post_audit.config import QuotaConfig, get_settings
from post_audit.exceptions import CorruptPersistedStateError, QuotaExhaustedError
from post_audit.persistence import read_record, write_atomic
from post_audit.schemas import QuotaState

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(UTC)


class QuotaStatus(StrEnum):
    """Health of today's quota relative to the safety threshold."""

    AVAILABLE = "available"
    WARNING = "warning"
    EXHAUSTED = "exhausted"


class QuotaLedger:
    """Persisted per-day request counter with a safety threshold.

    Usage:
        ledger = QuotaLedger(Path("results/daily_quota.json"))

        if ledger.check_quota() is QuotaStatus.EXHAUSTED:
            ...  # stop issuing calls until the reset
        await call_provider()
        ledger.increment_request_count()

    The ledger is owned by a single live process; it does no cross-process
    locking.
    """

    def __init__(
        self,
        path: Path,
        config: QuotaConfig | None = None,
        *,
        clock: Clock | None = None,
    ) -> None:
        """Initialize the ledger and load persisted state.

        Args:
            path: JSON file holding the persisted QuotaState
            config: Optional quota configuration (uses settings if not provided)
            clock: Returns the current aware datetime, injectable for tests
        """
        self._path = path
        self._config = config or get_settings().quota
        self._tz = ZoneInfo(self._config.reset_timezone)
        self._clock = clock or _utc_now
        self._warned_on: date | None = None
        self._state = self._load()

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------
    @property
    def path(self) -> Path:
        """Location of the persisted quota record."""
        return self._path

    @property
    def config(self) -> QuotaConfig:
        """Get the quota configuration."""
        return self._config

    @property
    def daily_limit(self) -> int:
        """Provider's hard daily limit."""
        return self._config.daily_limit

    @property
    def safety_threshold(self) -> int:
        """Request count at which the ledger halts."""
        return self._config.safety_threshold

    @property
    def warning_point(self) -> int:
        """Request count at which a warning is emitted."""
        # Round first so float noise (0.7 * 10 == 7.000000000000001) cannot push it up a step
        return max(1, math.ceil(round(self._config.safety_threshold * self._config.warning_ratio, 6)))

    @property
    def state(self) -> QuotaState:
        """Current state, rolled over to today if stale."""
        self._roll_over_if_needed()
        return self._state

    @property
    def request_count(self) -> int:
        """Requests issued so far today."""
        return self.state.request_count

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------
    def _today(self) -> date:
        return self._clock().astimezone(self._tz).date()

    def _fresh_state(self) -> QuotaState:
        return QuotaState(anchor_date=self._today(), request_count=0)

    def _load(self) -> QuotaState:
        try:
            state = read_record(self._path, QuotaState)
        except CorruptPersistedStateError as e:
            logger.warning("Failed to load quota state, starting fresh: %s", e)
            return self._fresh_state()

        if state is None:
            logger.info("No quota file at %s, starting fresh", self._path)
            return self._fresh_state()

        logger.info("Loaded quota state: %d requests used on %s", state.request_count, state.anchor_date)
        return state

    def _save(self) -> None:
        try:
            write_atomic(self._path, self._state.to_json())
        except OSError as e:
            logger.error("Failed to save quota state to %s: %s", self._path, e)
            return
        logger.debug("Saved quota state: %d requests on %s", self._state.request_count, self._state.anchor_date)

    def _roll_over_if_needed(self) -> None:
        today = self._today()
        if self._state.anchor_date == today:
            return
        logger.info(
            "New provider day, resetting quota. Previous: %d requests on %s, new date: %s",
            self._state.request_count,
            self._state.anchor_date,
            today,
        )
        self._state = QuotaState(anchor_date=today, request_count=0)
        self._save()

    # -------------------------------------------------------------------------
    # Quota Checks
    # -------------------------------------------------------------------------
    def status(self) -> QuotaStatus:
        """Classify today's usage without logging."""
        count = self.request_count
        if count >= self.safety_threshold:
            return QuotaStatus.EXHAUSTED
        if count >= self.warning_point:
            return QuotaStatus.WARNING
        return QuotaStatus.AVAILABLE

    def check_quota(self) -> QuotaStatus:
        """Classify today's usage against the safety threshold.

        Returns:
            EXHAUSTED once the count reaches the safety threshold, WARNING from
            the warning point on, AVAILABLE otherwise
        """
        count = self.request_count

        if count >= self.safety_threshold:
            logger.error(
                "Safety threshold reached (%d/%d). Daily limit %d, safety margin %d. Quota resets at %s",
                count,
                self.safety_threshold,
                self.daily_limit,
                self._config.safety_margin,
                self.reset_time_description(),
            )
            return QuotaStatus.EXHAUSTED

        if count >= self.warning_point:
            if self._warned_on != self._state.anchor_date:
                logger.warning(
                    "Approaching safety threshold: %d/%d requests (%d%% of threshold)",
                    count,
                    self.safety_threshold,
                    count * 100 // self.safety_threshold,
                )
                self._warned_on = self._state.anchor_date
            return QuotaStatus.WARNING

        return QuotaStatus.AVAILABLE

    def ensure_available(self) -> None:
        """Raise if no more requests may be issued today.

        Raises:
            QuotaExhaustedError: If the safety threshold has been reached
        """
        if self.check_quota() is QuotaStatus.EXHAUSTED:
            raise QuotaExhaustedError(
                f"Daily quota exhausted: {self.request_count}/{self.safety_threshold} requests "
                f"(daily limit {self.daily_limit})",
                reset_description=self.reset_time_description(),
            )

    def increment_request_count(self) -> int:
        """Record one issued request and persist the new count.

        Returns:
            The updated request count for today
        """
        self._roll_over_if_needed()
        self._state = self._state.model_copy(update={"request_count": self._state.request_count + 1})
        self._save()
        logger.debug(
            "Quota updated: %d/%d requests used (threshold %d), %d remaining",
            self._state.request_count,
            self.daily_limit,
            self.safety_threshold,
            self.remaining(),
        )
        return self._state.request_count

    def remaining(self) -> int:
        """Requests left before the safety threshold. Never negative."""
        return max(0, self.safety_threshold - self.request_count)

    def reset(self) -> None:
        """Discard today's count (operator override)."""
        self._state = self._fresh_state()
        self._save()

    # -------------------------------------------------------------------------
    # Reporting
    # -------------------------------------------------------------------------
    def next_reset_at(self) -> datetime:
        """Next midnight in the anchor timezone."""
        now = self._clock().astimezone(self._tz)
        tomorrow = now.date() + timedelta(days=1)
        return datetime(tomorrow.year, tomorrow.month, tomorrow.day, tzinfo=self._tz)

    def reset_time_description(self) -> str:
        """Human-readable time until the quota resets.

        Returns:
            e.g. ``"midnight America/Los_Angeles (in 7h 12m)"``
        """
        delta = self.next_reset_at() - self._clock().astimezone(self._tz)
        total_minutes = max(0, int(delta.total_seconds() // 60))
        hours, minutes = divmod(total_minutes, 60)
        return f"midnight {self._config.reset_timezone} (in {hours}h {minutes:02d}m)"

    def get_stats(self) -> dict[str, Any]:
        """Get ledger statistics for monitoring.

        Returns:
            Dict with today's usage and reset information
        """
        count = self.request_count
        return {
            "date": self._state.anchor_date.isoformat(),
            "timezone": self._config.reset_timezone,
            "used": count,
            "daily_limit": self.daily_limit,
            "safety_threshold": self.safety_threshold,
            "remaining": self.remaining(),
            "percent_of_limit": round(count * 100 / self.daily_limit, 1),
            "percent_of_threshold": round(count * 100 / self.safety_threshold, 1),
            "status": self.status().value,
            "resets": self.reset_time_description(),
        }

    def log_status(self) -> None:
        """Log a summary of today's quota usage."""
        stats = self.get_stats()
        logger.info(
            "Daily quota: %d/%d used on %s (%.1f%% of threshold %d), %d remaining, resets %s",
            stats["used"],
            stats["daily_limit"],
            stats["date"],
            stats["percent_of_threshold"],
            stats["safety_threshold"],
            stats["remaining"],
            stats["resets"],
        )
