"""Configuration settings for Post Audit."""

from functools import lru_cache
from pathlib import Path
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ProviderConfig(BaseModel):
    """Configuration for the generative-AI provider endpoint."""

    base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        description="Base URL of the Gemini REST API",
    )
    model: str = Field(
        default="gemini-2.5-flash-lite",
        description="Model used for post evaluation",
    )
    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Request-level timeout for a single evaluation call",
    )
    temperature: float = Field(
        default=0.2,
        ge=0.0,
        le=2.0,
        description="Sampling temperature sent with each request",
    )


class PathsConfig(BaseModel):
    """Locations of input, output and persisted state files."""

    archive_path: str = Field(
        default="data/tweets.js",
        description="Vendor archive export to evaluate",
    )
    output_path: str = Field(
        default="results/flagged_posts.csv",
        description="CSV file receiving flagged and errored posts",
    )
    checkpoint_path: str = Field(
        default="results/checkpoint.json",
        description="Resumable progress record for the current run",
    )
    quota_path: str = Field(
        default="results/daily_quota.json",
        description="Persisted daily request counter",
    )


class GovernorConfig(BaseModel):
    """Configuration for the adaptive pacing governor.

    All values are in milliseconds. The governor starts at
    ``initial_delay_ms`` and adapts between the min and max bounds.
    """

    min_delay_ms: int = Field(default=200, ge=0, description="Lower bound for the inter-call delay")
    max_delay_ms: int = Field(default=10_000, ge=1, description="Upper bound for the inter-call delay")
    initial_delay_ms: int = Field(default=1000, ge=0, description="Delay used before any feedback")

    # Latency thresholds
    fast_response_ms: int = Field(
        default=500,
        ge=0,
        description="Responses faster than this speed the governor up",
    )
    slow_response_ms: int = Field(
        default=3000,
        ge=0,
        description="Responses slower than this slow the governor down",
    )

    # Adjustment steps
    speed_up_ms: int = Field(default=100, ge=0, description="Delay reduction on a fast response")
    slow_down_ms: int = Field(
        default=500,
        ge=0,
        description="Delay increase on a slow response or server error",
    )

    @model_validator(mode="after")
    def _check_bounds(self) -> "GovernorConfig":
        if not self.min_delay_ms <= self.initial_delay_ms <= self.max_delay_ms:
            raise ValueError(
                "Governor delays must satisfy min_delay_ms <= initial_delay_ms <= max_delay_ms "
                f"(got {self.min_delay_ms} / {self.initial_delay_ms} / {self.max_delay_ms})"
            )
        if self.fast_response_ms > self.slow_response_ms:
            raise ValueError("fast_response_ms must not exceed slow_response_ms")
        return self


class QuotaConfig(BaseModel):
    """Configuration for the persisted daily quota ledger.

    The provider resets its daily counter at midnight in ``reset_timezone``,
    independently of the host's local timezone.
    """

    daily_limit: int = Field(
        default=1000,
        ge=1,
        description="Provider's hard requests-per-day limit",
    )
    safety_threshold: int = Field(
        default=950,
        ge=1,
        description="Request count at which the ledger halts new calls",
    )
    reset_timezone: str = Field(
        default="America/Los_Angeles",
        description="IANA timezone of the provider's daily reset",
    )
    warning_ratio: float = Field(
        default=0.9,
        gt=0.0,
        le=1.0,
        description="Fraction of the safety threshold at which a warning is logged",
    )

    @field_validator("reset_timezone")
    @classmethod
    def _check_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {value}") from e
        return value

    @model_validator(mode="after")
    def _check_threshold(self) -> "QuotaConfig":
        if self.safety_threshold > self.daily_limit:
            raise ValueError(
                f"safety_threshold ({self.safety_threshold}) must not exceed "
                f"daily_limit ({self.daily_limit})"
            )
        return self

    @property
    def safety_margin(self) -> int:
        """Requests deliberately left unused below the hard limit."""
        return self.daily_limit - self.safety_threshold


class RetryConfig(BaseModel):
    """Configuration for retrying transient provider failures."""

    max_attempts: int = Field(default=3, ge=1, le=10, description="Attempts per item, including the first")
    initial_delay_seconds: float = Field(default=1.0, ge=0.0, description="Back-off before the first retry")
    multiplier: float = Field(default=2.0, ge=1.0, description="Back-off growth factor per attempt")
    max_delay_seconds: float = Field(default=30.0, ge=0.0, description="Cap for a single back-off")
    jitter_ratio: float = Field(
        default=0.1,
        ge=0.0,
        le=1.0,
        description="Random +/- fraction applied to each back-off",
    )


class BatchConfig(BaseModel):
    """Configuration for batch scheduling and checkpointing."""

    batch_size: int = Field(default=10, ge=1, le=1000, description="Items per checkpointed batch")
    inter_batch_pause_seconds: float = Field(
        default=60.0,
        ge=0.0,
        description="Pause between batches to smooth provider load",
    )
    checkpoint_granularity: Literal["batch", "item"] = Field(
        default="batch",
        description="Commit progress after every batch or after every item",
    )


class AuditCriteria(BaseModel):
    """Alignment criteria the provider evaluates each post against."""

    forbidden_words: list[str] = Field(
        default_factory=list,
        description="Words that should cause a post to be flagged",
    )
    check_professionalism: bool = Field(
        default=True,
        description="Whether unprofessional posts should be flagged",
    )
    context: str = Field(
        default="professional software engineer's public profile",
        description="Who the posts are being evaluated for",
    )
    desired_tone: str = Field(
        default="respectful and constructive",
        description="Tone the posts are expected to have",
    )

    @classmethod
    def from_file(cls, path: Path) -> "AuditCriteria":
        """Load criteria from a JSON file."""
        return cls.model_validate_json(path.read_text(encoding="utf-8"))


class LoggingConfig(BaseModel):
    """Configuration for logging behavior.

    Controls file logging, rotation, and output format.
    """

    log_file: str | None = Field(
        default=None,
        description="Optional path for file logging (enables rotation)",
    )
    rotation: str = Field(
        default="10 MB",
        description="When to rotate log file (e.g., '10 MB', '1 day')",
    )
    retention: str = Field(
        default="7 days",
        description="How long to keep rotated logs",
    )
    serialize: bool = Field(
        default=False,
        description="If True, output JSON format to file",
    )


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # --------------------------------------------------------------------------
    # Provider
    # --------------------------------------------------------------------------
    gemini_api_key: str = Field(
        default="",
        description="Gemini API key",
    )
    provider: ProviderConfig = Field(
        default_factory=ProviderConfig,
        description="Provider endpoint configuration",
    )

    # --------------------------------------------------------------------------
    # Application
    # --------------------------------------------------------------------------
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    paths: PathsConfig = Field(
        default_factory=PathsConfig,
        description="Input, output and state file locations",
    )

    # --------------------------------------------------------------------------
    # Pacing, Quota & Retry
    # --------------------------------------------------------------------------
    pacing: GovernorConfig = Field(
        default_factory=GovernorConfig,
        description="Adaptive pacing configuration",
    )
    quota: QuotaConfig = Field(
        default_factory=QuotaConfig,
        description="Daily quota configuration",
    )
    retry: RetryConfig = Field(
        default_factory=RetryConfig,
        description="Transient failure retry configuration",
    )

    # --------------------------------------------------------------------------
    # Batch Processing
    # --------------------------------------------------------------------------
    batch: BatchConfig = Field(
        default_factory=BatchConfig,
        description="Batch scheduling configuration",
    )
    criteria: AuditCriteria = Field(
        default_factory=AuditCriteria,
        description="Alignment criteria for evaluation",
    )

    # --------------------------------------------------------------------------
    # Logging Configuration
    # --------------------------------------------------------------------------
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging configuration (file output, rotation)",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
