"""Tests for ProgressTracker throughput, ETA and periodic logging."""

import logging

import pytest

from post_audit.pacing import ProgressState, ProgressTracker, ProgressUpdate, format_duration


class FakeMonotonic:
    """Manually advanced monotonic clock."""

    def __init__(self) -> None:
        self.value = 100.0

    def __call__(self) -> float:
        return self.value


@pytest.fixture
def ticks() -> FakeMonotonic:
    return FakeMonotonic()


class TestProgressUpdate:
    """Tests for derived progress values."""

    def test_remaining_and_percent(self) -> None:
        """Remaining and percentage count completed and failed items."""
        update = ProgressUpdate(total=10, completed=3, failed=1, flagged=1, state=ProgressState.IN_PROGRESS)

        assert update.processed == 4
        assert update.remaining == 6
        assert update.progress_percent == 40.0

    def test_empty_run_is_complete(self) -> None:
        """A run with nothing to do reports 100%."""
        update = ProgressUpdate(total=0, completed=0, failed=0, flagged=0, state=ProgressState.PENDING)
        assert update.progress_percent == 100.0

    def test_rate_and_eta(self) -> None:
        """Rate is items per minute; ETA extrapolates from it."""
        update = ProgressUpdate(
            total=30,
            completed=10,
            failed=0,
            flagged=0,
            state=ProgressState.IN_PROGRESS,
            elapsed_seconds=120.0,
        )

        assert update.items_per_minute == 5.0
        assert update.eta_seconds == pytest.approx(240.0)

    def test_eta_unknown_before_progress(self) -> None:
        """No ETA until throughput is known."""
        update = ProgressUpdate(total=5, completed=0, failed=0, flagged=0, state=ProgressState.IN_PROGRESS)
        assert update.eta_seconds is None


class TestProgressTracker:
    """Tests for tracker state changes."""

    def test_counts_outcomes(self, ticks: FakeMonotonic) -> None:
        """increment and increment_failed update the right counters."""
        tracker = ProgressTracker(total=3, clock=ticks)
        tracker.start()
        tracker.increment(flagged=True)
        tracker.increment()
        tracker.increment_failed("boom")

        assert tracker.completed == 2
        assert tracker.flagged == 1
        assert tracker.failed == 1
        assert tracker.get_update().remaining == 0

    def test_lifecycle_states(self, ticks: FakeMonotonic) -> None:
        """Tracker moves through its states."""
        tracker = ProgressTracker(total=1, clock=ticks)
        assert tracker.state == ProgressState.PENDING
        tracker.start()
        assert tracker.state == ProgressState.IN_PROGRESS
        tracker.pause("quota")
        assert tracker.state == ProgressState.PAUSED
        tracker.cancel()
        assert tracker.state == ProgressState.CANCELLED
        tracker.complete()
        assert tracker.state == ProgressState.COMPLETED

    def test_callbacks_receive_updates(self, ticks: FakeMonotonic) -> None:
        """Registered callbacks see every change."""
        updates: list[ProgressUpdate] = []
        tracker = ProgressTracker(total=2, clock=ticks)
        tracker.on_progress(updates.append)

        tracker.start()
        tracker.set_current("42")
        tracker.increment()

        assert updates[1].current_item == "42"
        assert updates[-1].completed == 1

    def test_callback_errors_are_contained(self, ticks: FakeMonotonic) -> None:
        """A failing callback does not break tracking."""

        def broken(update: ProgressUpdate) -> None:
            raise RuntimeError("callback bug")

        tracker = ProgressTracker(total=1, clock=ticks)
        tracker.on_progress(broken)
        tracker.start()
        tracker.increment()

        assert tracker.completed == 1

    def test_elapsed_uses_clock(self, ticks: FakeMonotonic) -> None:
        """Elapsed time comes from the injected clock."""
        tracker = ProgressTracker(total=1, clock=ticks)
        assert tracker.elapsed_seconds == 0.0
        tracker.start()
        ticks.value += 42
        assert tracker.elapsed_seconds == 42


class TestPeriodicLogging:
    """Tests for progress log cadence."""

    def _progress_lines(self, caplog: pytest.LogCaptureFixture) -> list[str]:
        return [r.getMessage() for r in caplog.records if "progress:" in r.getMessage()]

    def test_logs_every_n_items(self, ticks: FakeMonotonic, caplog: pytest.LogCaptureFixture) -> None:
        """A progress line is logged every log_every_items items."""
        caplog.set_level(logging.INFO, logger="post_audit.pacing.progress")
        tracker = ProgressTracker(total=25, clock=ticks, log_every_items=10, log_every_seconds=3600)
        tracker.start()
        for _ in range(25):
            ticks.value += 1
            tracker.increment()

        assert len(self._progress_lines(caplog)) == 2

    def test_logs_after_interval(self, ticks: FakeMonotonic, caplog: pytest.LogCaptureFixture) -> None:
        """A progress line is logged once log_every_seconds have passed."""
        caplog.set_level(logging.INFO, logger="post_audit.pacing.progress")
        tracker = ProgressTracker(total=100, clock=ticks, log_every_items=1000, log_every_seconds=30)
        tracker.start()

        ticks.value += 10
        tracker.increment()
        assert self._progress_lines(caplog) == []

        ticks.value += 25
        tracker.increment()
        lines = self._progress_lines(caplog)
        assert len(lines) == 1
        assert "items/min" in lines[0]
        assert "ETA" in lines[0]


class TestFormatDuration:
    """Tests for format_duration."""

    @pytest.mark.parametrize(
        ("seconds", "expected"),
        [
            (None, "unknown"),
            (0, "0s"),
            (59.4, "59s"),
            (61, "1m 01s"),
            (3600 + 5 * 60, "1h 05m"),
        ],
    )
    def test_formats(self, seconds: float | None, expected: str) -> None:
        """Durations render compactly."""
        assert format_duration(seconds) == expected
