"""Pytest configuration and shared fixtures.

Usage Guide:
- For items, results and checkpoints: import factories from tests.factories
- For canned archive files and provider payloads: import from tests.fixtures
- Pipeline fixtures below are configured with zero delays so scheduler
  tests run instantly
"""

from collections.abc import Callable, Iterator
from datetime import UTC, datetime
from pathlib import Path

import pytest

from post_audit.config import (
    AuditCriteria,
    BatchConfig,
    GovernorConfig,
    QuotaConfig,
    RetryConfig,
    get_settings,
)
from post_audit.pacing import PacingGovernor
from post_audit.pipeline import CheckpointStore, RetryPolicy
from post_audit.quota import QuotaLedger

# -----------------------------------------------------------------------------
# Test Timeline Constants
#
# 2024-03-15 20:00 UTC is 13:00 on 2024-03-15 in America/Los_Angeles (PDT),
# 11 hours before the provider's midnight reset.
# -----------------------------------------------------------------------------
MAR_15_AFTERNOON_UTC = datetime(2024, 3, 15, 20, 0, 0, tzinfo=UTC)
MAR_15_LATE_UTC = datetime(2024, 3, 16, 6, 30, 0, tzinfo=UTC)   # 23:30 PDT, still Mar 15
MAR_16_MORNING_UTC = datetime(2024, 3, 16, 16, 0, 0, tzinfo=UTC)  # 09:00 PDT on Mar 16

VALID_API_KEY = "AIza" + "x" * 35


class FakeClock:
    """Mutable clock for deterministic day-rollover tests."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


# -----------------------------------------------------------------------------
# Settings Isolation
# -----------------------------------------------------------------------------
@pytest.fixture(autouse=True)
def _clear_settings_cache() -> Iterator[None]:
    """Make every test read settings fresh."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# -----------------------------------------------------------------------------
# Configuration Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def criteria() -> AuditCriteria:
    """Criteria with a couple of forbidden words."""
    return AuditCriteria(
        forbidden_words=["crypto", "damn"],
        check_professionalism=True,
        context="software engineer's public profile",
        desired_tone="respectful and constructive",
    )


@pytest.fixture
def instant_governor_config() -> GovernorConfig:
    """Governor config whose waits are effectively zero."""
    return GovernorConfig(min_delay_ms=0, initial_delay_ms=0, max_delay_ms=1)


@pytest.fixture
def instant_retry_config() -> RetryConfig:
    """Retry config with no back-off and no jitter."""
    return RetryConfig(max_attempts=3, initial_delay_seconds=0.0, jitter_ratio=0.0)


@pytest.fixture
def batch_config() -> BatchConfig:
    """Batch config without inter-batch pauses."""
    return BatchConfig(batch_size=10, inter_batch_pause_seconds=0.0)


@pytest.fixture
def quota_config() -> QuotaConfig:
    """Default provider limits."""
    return QuotaConfig(daily_limit=1000, safety_threshold=950)


# -----------------------------------------------------------------------------
# Component Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def clock() -> FakeClock:
    """Clock fixed at the afternoon of 2024-03-15 (provider time)."""
    return FakeClock(MAR_15_AFTERNOON_UTC)


@pytest.fixture
def quota_path(tmp_path: Path) -> Path:
    """Location of the quota file."""
    return tmp_path / "results" / "daily_quota.json"


@pytest.fixture
def checkpoint_path(tmp_path: Path) -> Path:
    """Location of the checkpoint file."""
    return tmp_path / "results" / "checkpoint.json"


@pytest.fixture
def ledger(quota_path: Path, quota_config: QuotaConfig, clock: FakeClock) -> QuotaLedger:
    """Quota ledger backed by a temp file."""
    return QuotaLedger(quota_path, quota_config, clock=clock)


@pytest.fixture
def make_ledger(quota_path: Path, clock: FakeClock) -> Callable[..., QuotaLedger]:
    """Build a ledger with custom limits against the shared quota file."""

    def _make(daily_limit: int = 1000, safety_threshold: int = 950) -> QuotaLedger:
        config = QuotaConfig(daily_limit=daily_limit, safety_threshold=safety_threshold)
        return QuotaLedger(quota_path, config, clock=clock)

    return _make


@pytest.fixture
def checkpoint_store(checkpoint_path: Path) -> CheckpointStore:
    """Checkpoint store backed by a temp file."""
    return CheckpointStore(checkpoint_path)


@pytest.fixture
def governor(instant_governor_config: GovernorConfig) -> PacingGovernor:
    """Governor that never really waits."""
    return PacingGovernor(instant_governor_config)


@pytest.fixture
def retry_policy(instant_retry_config: RetryConfig) -> RetryPolicy:
    """Retry policy without back-off."""
    return RetryPolicy(instant_retry_config)
