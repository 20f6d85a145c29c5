"""Schemas for persisted pipeline state."""

from datetime import date, datetime

from pydantic import Field, field_serializer

from .base import SchemaBase
from .evaluation import EvaluationResult


class QuotaState(SchemaBase):
    """Daily request counter anchored to the provider's reset timezone."""

    anchor_date: date = Field(description="Calendar date in the anchor timezone")
    request_count: int = Field(default=0, ge=0, description="Requests issued on anchor_date")


class ProcessingCheckpoint(SchemaBase):
    """Resumable progress for the current run.

    Each save overwrites the whole record. ``results`` holds only reportable
    (flagged or errored) results so they survive a paused run.
    """

    processed_ids: set[str] = Field(default_factory=set)
    last_processed_id: str | None = None
    timestamp: datetime | None = None
    total_processed: int = Field(default=0, ge=0)
    total_items: int = Field(default=0, ge=0)
    flagged_count: int = Field(default=0, ge=0)
    error_count: int = Field(default=0, ge=0)
    results: list[EvaluationResult] = Field(default_factory=list)

    @field_serializer("processed_ids")
    def _serialize_processed_ids(self, value: set[str]) -> list[str]:
        return sorted(value)

    @property
    def clean_count(self) -> int:
        """Processed items that were neither flagged nor errored."""
        return max(0, self.total_processed - self.flagged_count - self.error_count)
