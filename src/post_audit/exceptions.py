"""Post Audit pipeline exceptions.

These are reserved for conditions that stop further progress. Item-level
provider failures never surface here; they become failure results.
"""


class PipelineError(Exception):
    """Base exception for pipeline errors."""

    pass


class QuotaExhaustedError(PipelineError):
    """Raised when the daily safety threshold has been reached.

    This is not retryable within the current day. The scheduler persists its
    checkpoint and pauses until the provider's quota resets.
    """

    def __init__(self, message: str, reset_description: str | None = None) -> None:
        super().__init__(message)
        self.reset_description = reset_description


class IngestionError(PipelineError):
    """Raised when the archive is missing, unreadable or malformed."""

    pass


class CheckpointStoreError(PipelineError):
    """Raised when the checkpoint cannot be written or removed."""

    pass


class CorruptPersistedStateError(PipelineError):
    """Raised when a persisted quota or checkpoint file cannot be parsed.

    Stores catch this internally and fall back to fresh state.
    """

    pass


class ConfigurationError(PipelineError):
    """Raised when run settings fail validation before any provider call."""

    def __init__(self, message: str, problems: list[str] | None = None) -> None:
        super().__init__(message)
        self.problems = problems or []


class OutputError(PipelineError):
    """Raised when the result listing cannot be written."""

    pass
