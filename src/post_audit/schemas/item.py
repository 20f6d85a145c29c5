"""Schemas for archived posts."""

from datetime import datetime
from typing import Any

from pydantic import Field, field_validator

from .base import SchemaBase

# Vendor archive timestamp format, e.g. "Wed Oct 10 20:19:24 +0000 2018"
ARCHIVE_DATE_FORMAT = "%a %b %d %H:%M:%S %z %Y"

REPOST_PREFIX = "RT @"

POST_URL_TEMPLATE = "https://x.com/i/status/{id}"


class Item(SchemaBase):
    """A single archived post. Produced once by ingestion and never mutated."""

    id: str = Field(min_length=1, description="Stable post identifier")
    text: str = Field(default="", description="Full post text")
    created_at: datetime | None = Field(default=None, description="When the post was published")

    @field_validator("created_at", mode="before")
    @classmethod
    def _parse_created_at(cls, value: Any) -> Any:
        if isinstance(value, str):
            if not value.strip():
                return None
            try:
                return datetime.strptime(value, ARCHIVE_DATE_FORMAT)
            except ValueError:
                # Fall through to pydantic's ISO-8601 parsing
                return value
        return value

    @property
    def is_repost(self) -> bool:
        """Whether this post is a repost of someone else's content."""
        return self.text.startswith(REPOST_PREFIX)

    @property
    def url(self) -> str:
        """Public URL of the post."""
        return POST_URL_TEMPLATE.format(id=self.id)
