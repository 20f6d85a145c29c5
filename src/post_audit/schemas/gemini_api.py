"""Pydantic schemas for Gemini generateContent payloads.

Only the fields the client reads or sends are modelled; unknown response
fields are ignored.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class GeminiPart(BaseModel):
    """A single content part."""

    model_config = ConfigDict(extra="ignore")

    text: str | None = None


class GeminiContent(BaseModel):
    """Content block of a request or candidate."""

    model_config = ConfigDict(extra="ignore")

    role: str | None = None
    parts: list[GeminiPart] = Field(default_factory=list)


class GeminiGenerationConfig(BaseModel):
    """Generation settings sent with each request."""

    model_config = ConfigDict(populate_by_name=True)

    response_mime_type: str = Field(default="application/json", alias="responseMimeType")
    response_json_schema: dict[str, Any] = Field(alias="responseJsonSchema")
    temperature: float = 0.2


class GeminiRequest(BaseModel):
    """Body of a generateContent request."""

    model_config = ConfigDict(populate_by_name=True)

    contents: list[GeminiContent]
    generation_config: GeminiGenerationConfig = Field(alias="generationConfig")

    def to_payload(self) -> dict[str, Any]:
        """Serialize using the wire field names."""
        return self.model_dump(by_alias=True, exclude_none=True)


class GeminiCandidate(BaseModel):
    """One generated candidate."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    content: GeminiContent | None = None
    finish_reason: str | None = Field(default=None, alias="finishReason")


class GeminiResponse(BaseModel):
    """Body of a generateContent response."""

    model_config = ConfigDict(extra="ignore")

    candidates: list[GeminiCandidate] = Field(default_factory=list)

    def first_text(self) -> str | None:
        """Text of the first part of the first candidate, if any."""
        if not self.candidates:
            return None
        content = self.candidates[0].content
        if content is None or not content.parts:
            return None
        return content.parts[0].text


class GeminiDecision(BaseModel):
    """The JSON document the model returns inside the first part."""

    model_config = ConfigDict(extra="ignore")

    should_flag: bool
    rationale: str = ""
    matched_criteria: list[str] = Field(default_factory=list)
