"""Tests for configuration settings."""

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from post_audit.config import (
    AuditCriteria,
    BatchConfig,
    GovernorConfig,
    QuotaConfig,
    Settings,
    get_settings,
)


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Defaults match the provider's free tier."""
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        settings = Settings(_env_file=None)

        assert settings.gemini_api_key == ""
        assert settings.quota.daily_limit == 1000
        assert settings.quota.safety_threshold == 950
        assert settings.quota.safety_margin == 50
        assert settings.quota.reset_timezone == "America/Los_Angeles"
        assert settings.pacing.initial_delay_ms == 1000
        assert settings.batch.batch_size == 10
        assert settings.batch.checkpoint_granularity == "batch"
        assert settings.retry.max_attempts == 3
        assert settings.paths.archive_path == "data/tweets.js"
        assert settings.paths.output_path == "results/flagged_posts.csv"

    def test_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Environment variables override defaults."""
        monkeypatch.setenv("GEMINI_API_KEY", "key-from-env")
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("ENVIRONMENT", "production")

        settings = Settings(_env_file=None)

        assert settings.gemini_api_key == "key-from-env"
        assert settings.log_level == "DEBUG"
        assert settings.environment == "production"

    def test_nested_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Nested sections are set with a double-underscore delimiter."""
        monkeypatch.setenv("QUOTA__SAFETY_THRESHOLD", "900")
        monkeypatch.setenv("BATCH__BATCH_SIZE", "25")
        monkeypatch.setenv("PATHS__ARCHIVE_PATH", "export/tweets.js")

        settings = Settings(_env_file=None)

        assert settings.quota.safety_threshold == 900
        assert settings.batch.batch_size == 25
        assert settings.paths.archive_path == "export/tweets.js"

    def test_invalid_log_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """An unknown log level is rejected."""
        monkeypatch.setenv("LOG_LEVEL", "LOUD")

        with pytest.raises(ValueError):
            Settings(_env_file=None)

    def test_threshold_above_limit_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """A threshold above the hard limit fails at load time."""
        monkeypatch.setenv("QUOTA__SAFETY_THRESHOLD", "1200")

        with pytest.raises(ValidationError):
            Settings(_env_file=None)


class TestSections:
    """Tests for individual configuration sections."""

    def test_governor_bounds(self) -> None:
        """The initial delay must lie within the bounds."""
        with pytest.raises(ValidationError, match="min_delay_ms"):
            GovernorConfig(min_delay_ms=500, initial_delay_ms=100)

    def test_governor_thresholds(self) -> None:
        """The fast threshold cannot exceed the slow threshold."""
        with pytest.raises(ValidationError, match="fast_response_ms"):
            GovernorConfig(fast_response_ms=4000, slow_response_ms=3000)

    def test_batch_size_positive(self) -> None:
        """A zero batch size is rejected."""
        with pytest.raises(ValidationError):
            BatchConfig(batch_size=0)

    def test_granularity_values(self) -> None:
        """Only batch and item granularity exist."""
        assert BatchConfig(checkpoint_granularity="item").checkpoint_granularity == "item"
        with pytest.raises(ValidationError):
            BatchConfig(checkpoint_granularity="hourly")  # type: ignore[arg-type]

    def test_quota_margin(self) -> None:
        """The safety margin is the gap below the hard limit."""
        assert QuotaConfig(daily_limit=500, safety_threshold=450).safety_margin == 50


class TestAuditCriteria:
    """Tests for criteria loading."""

    def test_from_file(self, tmp_path: Path) -> None:
        """Criteria load from a JSON file; unspecified fields keep defaults."""
        path = tmp_path / "criteria.json"
        path.write_text(json.dumps({"forbidden_words": ["nft"], "desired_tone": "calm"}))

        criteria = AuditCriteria.from_file(path)

        assert criteria.forbidden_words == ["nft"]
        assert criteria.desired_tone == "calm"
        assert criteria.check_professionalism is True

    def test_from_file_invalid(self, tmp_path: Path) -> None:
        """A malformed criteria file raises a validation error."""
        path = tmp_path / "criteria.json"
        path.write_text('{"forbidden_words": "not a list"}')

        with pytest.raises(ValidationError):
            AuditCriteria.from_file(path)


class TestGetSettings:
    """Tests for get_settings."""

    def test_returns_settings(self) -> None:
        """get_settings returns a Settings instance."""
        assert isinstance(get_settings(), Settings)

    def test_cached(self) -> None:
        """Repeated calls return the same object."""
        assert get_settings() is get_settings()
