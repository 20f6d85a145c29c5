"""Test fixtures for Post Audit."""

from .archive_samples import (
    ARCHIVE_JS,
    ARCHIVE_KEPT_IDS,
    EMPTY_ARCHIVE_JS,
    NO_ARRAY_JS,
    TRUNCATED_ARCHIVE_JS,
)
from .gemini_responses import (
    CLEAN_DECISION,
    FLAGGED_DECISION,
    GEMINI_CLEAN_RESPONSE,
    GEMINI_FLAGGED_RESPONSE,
    GEMINI_INVALID_KEY_ERROR,
    GEMINI_NO_CANDIDATES_RESPONSE,
    GEMINI_NO_PARTS_RESPONSE,
    GEMINI_NON_JSON_RESPONSE,
    GEMINI_RATE_LIMIT_ERROR,
    GEMINI_UNAVAILABLE_ERROR,
)

__all__ = [
    # Vendor archive exports
    "ARCHIVE_JS",
    "ARCHIVE_KEPT_IDS",
    "EMPTY_ARCHIVE_JS",
    "NO_ARRAY_JS",
    "TRUNCATED_ARCHIVE_JS",
    # Gemini API payloads
    "CLEAN_DECISION",
    "FLAGGED_DECISION",
    "GEMINI_CLEAN_RESPONSE",
    "GEMINI_FLAGGED_RESPONSE",
    "GEMINI_INVALID_KEY_ERROR",
    "GEMINI_NO_CANDIDATES_RESPONSE",
    "GEMINI_NO_PARTS_RESPONSE",
    "GEMINI_NON_JSON_RESPONSE",
    "GEMINI_RATE_LIMIT_ERROR",
    "GEMINI_UNAVAILABLE_ERROR",
]
