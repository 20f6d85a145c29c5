"""Result objects for audit runs.

Structured results provide consistent interfaces for monitoring,
error handling, and CLI output.
"""

from dataclasses import dataclass, field
from typing import Any

from post_audit.schemas import EvaluationResult

from .enums import RunStatus


@dataclass
class AuditRunResult:
    """Outcome of one scheduler invocation.

    Counters for ``processed``, ``flagged``, ``errors`` and ``clean`` cover the
    whole run including work restored from a checkpoint.
    """

    status: RunStatus
    """How the run ended."""

    total_items: int = 0
    """Items produced by ingestion."""

    already_processed: int = 0
    """Items skipped because the checkpoint had them."""

    processed: int = 0
    """Items processed in total, across resumed invocations."""

    flagged: int = 0
    """Items the provider flagged."""

    errors: int = 0
    """Items that ended with a failure result."""

    batches_completed: int = 0
    """Batches committed during this invocation."""

    duration_seconds: float = 0.0
    """Wall-clock time of this invocation."""

    quota_reset: str | None = None
    """When the quota resets (set when paused on quota)."""

    results: list[EvaluationResult] = field(default_factory=list)
    """Reportable results (flagged or errored) accumulated so far."""

    @property
    def clean(self) -> int:
        """Items evaluated and not flagged."""
        return max(0, self.processed - self.flagged - self.errors)

    @property
    def remaining(self) -> int:
        """Items not yet processed."""
        return max(0, self.total_items - self.processed)

    @property
    def success(self) -> bool:
        """True if the run processed every item."""
        return self.status is RunStatus.COMPLETED

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "status": self.status.value,
            "total_items": self.total_items,
            "already_processed": self.already_processed,
            "processed": self.processed,
            "flagged": self.flagged,
            "errors": self.errors,
            "clean": self.clean,
            "remaining": self.remaining,
            "batches_completed": self.batches_completed,
            "duration_seconds": round(self.duration_seconds, 2),
            "quota_reset": self.quota_reset,
            "results": [
                {
                    "item_id": r.item_id,
                    "status": r.status,
                    "reason": r.reason,
                }
                for r in self.results
            ],
        }
