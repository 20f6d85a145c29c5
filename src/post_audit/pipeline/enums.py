"""Enums for audit runs."""

from enum import Enum


class RunStatus(str, Enum):
    """How an audit run ended."""

    COMPLETED = "completed"
    """Every item was processed; output written and checkpoint cleared."""

    PAUSED_QUOTA = "paused_quota"
    """Daily quota reached; checkpoint kept for the next day."""

    CANCELLED = "cancelled"
    """Stopped on operator request; last saved checkpoint kept."""


class SchedulerState(str, Enum):
    """Lifecycle state of the audit scheduler."""

    INIT = "init"
    RESUMING = "resuming"
    RUNNING = "running"
    PAUSING = "pausing"
    FINALIZING = "finalizing"
    DONE = "done"
    SHUTTING_DOWN = "shutting_down"
    CANCELLED = "cancelled"


class OutputFormat(str, Enum):
    """Output format for CLI commands."""

    TEXT = "text"
    """Human-readable text output."""

    JSON = "json"
    """Machine-readable JSON output."""
