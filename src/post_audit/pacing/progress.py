"""Progress tracking for long audit runs.

Reports processed counts, throughput and an ETA. Periodic progress lines
are logged every ``log_every_items`` items or ``log_every_seconds`` seconds,
whichever comes first.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum

logger = logging.getLogger(__name__)


class ProgressState(StrEnum):
    """State of a tracked run."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    PAUSED = "paused"
    CANCELLED = "cancelled"


@dataclass
class ProgressUpdate:
    """A progress update event."""

    total: int
    completed: int
    failed: int
    flagged: int
    state: ProgressState
    current_item: str | None = None
    started_at: datetime | None = None
    elapsed_seconds: float = 0.0

    @property
    def processed(self) -> int:
        """Items processed so far, whatever their outcome."""
        return self.completed + self.failed

    @property
    def remaining(self) -> int:
        """Number of items remaining."""
        return max(0, self.total - self.processed)

    @property
    def progress_percent(self) -> float:
        """Completion percentage (0-100)."""
        if self.total == 0:
            return 100.0
        return (self.processed / self.total) * 100

    @property
    def items_per_minute(self) -> float:
        """Observed throughput."""
        if self.elapsed_seconds <= 0:
            return 0.0
        return self.processed / (self.elapsed_seconds / 60)

    @property
    def eta_seconds(self) -> float | None:
        """Estimated seconds until completion, or None before any throughput is known."""
        rate = self.items_per_minute
        if rate <= 0:
            return None
        return (self.remaining / rate) * 60


ProgressCallback = Callable[[ProgressUpdate], None]


def format_duration(seconds: float | None) -> str:
    """Render a duration as a compact human string, e.g. ``1h 05m``."""
    if seconds is None:
        return "unknown"
    total = int(round(seconds))
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}h {minutes:02d}m"
    if minutes:
        return f"{minutes}m {secs:02d}s"
    return f"{secs}s"


class ProgressTracker:
    """Observable progress tracker for an audit run.

    Usage:
        tracker = ProgressTracker(total=len(remaining), name="audit")
        tracker.on_progress(lambda update: print(f"{update.progress_percent:.0f}%"))

        tracker.start()
        for item in remaining:
            tracker.set_current(item.id)
            result = await evaluate(item)
            if result.is_error:
                tracker.increment_failed()
            else:
                tracker.increment(flagged=result.is_flagged)
        tracker.complete()
    """

    def __init__(
        self,
        total: int = 0,
        name: str = "audit",
        *,
        log_every_items: int = 10,
        log_every_seconds: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the progress tracker.

        Args:
            total: Total number of items to process
            name: Name of the run for logging
            log_every_items: Log a progress line after this many items
            log_every_seconds: Log a progress line after this many seconds
            clock: Monotonic clock, injectable for tests
        """
        self._total = total
        self._name = name
        self._log_every_items = log_every_items
        self._log_every_seconds = log_every_seconds
        self._clock = clock
        self._completed = 0
        self._failed = 0
        self._flagged = 0
        self._state = ProgressState.PENDING
        self._current_item: str | None = None
        self._started_at: datetime | None = None
        self._start_time: float | None = None
        self._last_log_time: float | None = None
        self._last_log_count = 0
        self._callbacks: list[ProgressCallback] = []

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------
    @property
    def total(self) -> int:
        """Total number of items to process."""
        return self._total

    @property
    def completed(self) -> int:
        """Items evaluated with a decision."""
        return self._completed

    @property
    def failed(self) -> int:
        """Items that ended with a failure result."""
        return self._failed

    @property
    def flagged(self) -> int:
        """Items the provider flagged."""
        return self._flagged

    @property
    def state(self) -> ProgressState:
        """Current state of the run."""
        return self._state

    @property
    def elapsed_seconds(self) -> float:
        """Elapsed time since start in seconds."""
        if self._start_time is None:
            return 0.0
        return self._clock() - self._start_time

    # -------------------------------------------------------------------------
    # Callbacks
    # -------------------------------------------------------------------------
    def on_progress(self, callback: ProgressCallback) -> None:
        """Register a callback receiving a ProgressUpdate on every change."""
        self._callbacks.append(callback)

    def _notify(self) -> None:
        update = self.get_update()
        for callback in self._callbacks:
            try:
                callback(update)
            except Exception as e:
                logger.warning("Progress callback error: %s", e)

    # -------------------------------------------------------------------------
    # State Management
    # -------------------------------------------------------------------------
    def start(self) -> None:
        """Mark the run as started."""
        self._state = ProgressState.IN_PROGRESS
        self._started_at = datetime.now(UTC)
        self._start_time = self._clock()
        self._last_log_time = self._start_time
        self._last_log_count = 0
        logger.info("Started %s (total=%d)", self._name, self._total)
        self._notify()

    def complete(self) -> None:
        """Mark the run as completed."""
        self._state = ProgressState.COMPLETED
        self._current_item = None
        logger.info(
            "Completed %s: %d evaluated, %d flagged, %d errors in %s",
            self._name,
            self._completed,
            self._flagged,
            self._failed,
            format_duration(self.elapsed_seconds),
        )
        self._notify()

    def pause(self, reason: str) -> None:
        """Mark the run as paused (resumable later)."""
        self._state = ProgressState.PAUSED
        self._current_item = None
        logger.info("Paused %s at %d/%d: %s", self._name, self._completed + self._failed, self._total, reason)
        self._notify()

    def cancel(self) -> None:
        """Mark the run as cancelled."""
        self._state = ProgressState.CANCELLED
        self._current_item = None
        logger.info("Cancelled %s at %d/%d", self._name, self._completed + self._failed, self._total)
        self._notify()

    # -------------------------------------------------------------------------
    # Progress Updates
    # -------------------------------------------------------------------------
    def set_current(self, item: str) -> None:
        """Set the item currently being processed."""
        self._current_item = item
        self._notify()

    def increment(self, *, flagged: bool = False) -> None:
        """Record an item evaluated with a decision.

        Args:
            flagged: Whether the provider flagged the item
        """
        self._completed += 1
        if flagged:
            self._flagged += 1
        self._current_item = None
        self._maybe_log()
        self._notify()

    def increment_failed(self, error: str | None = None) -> None:
        """Record an item that ended with a failure result.

        Args:
            error: Optional error description
        """
        self._failed += 1
        self._current_item = None
        if error:
            logger.warning("%s item failed: %s", self._name, error)
        self._maybe_log()
        self._notify()

    def _maybe_log(self) -> None:
        processed = self._completed + self._failed
        now = self._clock()
        due_by_count = processed - self._last_log_count >= self._log_every_items
        due_by_time = self._last_log_time is not None and now - self._last_log_time >= self._log_every_seconds
        if not (due_by_count or due_by_time):
            return

        update = self.get_update()
        logger.info(
            "%s progress: %d/%d (%.1f%%) | %.1f items/min | ETA %s",
            self._name,
            update.processed,
            update.total,
            update.progress_percent,
            update.items_per_minute,
            format_duration(update.eta_seconds),
        )
        self._last_log_time = now
        self._last_log_count = processed

    # -------------------------------------------------------------------------
    # Query Methods
    # -------------------------------------------------------------------------
    def get_update(self) -> ProgressUpdate:
        """Get current progress as an update object."""
        return ProgressUpdate(
            total=self._total,
            completed=self._completed,
            failed=self._failed,
            flagged=self._flagged,
            state=self._state,
            current_item=self._current_item,
            started_at=self._started_at,
            elapsed_seconds=self.elapsed_seconds,
        )
