"""Schemas for evaluation results.

A result carries exactly one payload: a ``Decision`` from the provider or a
``Failure`` describing why no decision could be obtained. A missing decision
never means "clean"; it means the post was not evaluated.
"""

from typing import Self

from pydantic import Field, model_validator

from .base import SchemaBase


class Decision(SchemaBase):
    """Provider verdict for a post."""

    should_flag: bool = Field(description="Whether the post violates the criteria")
    rationale: str = Field(default="", description="Explanation of the verdict")
    matched_criteria: list[str] = Field(
        default_factory=list,
        description="Criteria the post matched, in provider order",
    )


class Failure(SchemaBase):
    """Item-level failure payload."""

    error_message: str = Field(description="Why the post could not be evaluated")


class EvaluationResult(SchemaBase):
    """Outcome of evaluating a single post."""

    item_id: str = Field(min_length=1)
    decision: Decision | None = None
    failure: Failure | None = None

    @model_validator(mode="after")
    def _exactly_one_payload(self) -> Self:
        if (self.decision is None) == (self.failure is None):
            raise ValueError("EvaluationResult requires exactly one of decision or failure")
        return self

    @classmethod
    def from_decision(
        cls,
        item_id: str,
        should_flag: bool,
        rationale: str = "",
        matched_criteria: list[str] | None = None,
    ) -> Self:
        """Create a result carrying a provider decision."""
        return cls(
            item_id=item_id,
            decision=Decision(
                should_flag=should_flag,
                rationale=rationale,
                matched_criteria=matched_criteria or [],
            ),
        )

    @classmethod
    def from_error(cls, item_id: str, error_message: str) -> Self:
        """Create a result representing a failed evaluation."""
        return cls(item_id=item_id, failure=Failure(error_message=error_message))

    @property
    def is_error(self) -> bool:
        """True if no decision could be obtained."""
        return self.failure is not None

    @property
    def is_flagged(self) -> bool:
        """True if the provider decided the post should be flagged."""
        return self.decision is not None and self.decision.should_flag

    @property
    def is_reportable(self) -> bool:
        """True if the result belongs in the output listing."""
        return self.is_flagged or self.is_error

    @property
    def reason(self) -> str:
        """Rationale of the decision, or the error message of the failure."""
        if self.failure is not None:
            return self.failure.error_message
        return self.decision.rationale if self.decision is not None else ""

    @property
    def matched_criteria(self) -> list[str]:
        """Criteria matched by the decision (empty for failures)."""
        return list(self.decision.matched_criteria) if self.decision is not None else []

    @property
    def status(self) -> str:
        """Short status label: FLAGGED, ERROR or CLEAN."""
        if self.is_error:
            return "ERROR"
        if self.is_flagged:
            return "FLAGGED"
        return "CLEAN"
