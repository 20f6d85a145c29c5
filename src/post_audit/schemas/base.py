"""Base schema class with JSON persistence helpers."""

from typing import Self

from pydantic import BaseModel, ConfigDict


class SchemaBase(BaseModel):
    """Base class for all Pydantic records.

    Records are immutable once built; state changes produce a new
    instance via ``model_copy(update=...)``.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
    )

    @classmethod
    def from_json(cls, data: str | bytes) -> Self:
        """
        Factory method to create a record from its JSON representation.

        Args:
            data: JSON document

        Returns:
            Validated record instance

        Raises:
            pydantic.ValidationError: If the document is malformed
        """
        return cls.model_validate_json(data)

    def to_json(self) -> str:
        """Serialize the record to pretty-printed JSON."""
        return self.model_dump_json(indent=2)
