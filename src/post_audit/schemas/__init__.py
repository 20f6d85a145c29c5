"""Pydantic schemas for Post Audit records.

This module exports:
- Item: an archived post
- EvaluationResult (Decision / Failure): outcome of evaluating a post
- ProcessingCheckpoint, QuotaState: persisted pipeline state
- Gemini*: generateContent request/response payloads
"""

from .base import SchemaBase
from .checkpoint import ProcessingCheckpoint, QuotaState
from .evaluation import Decision, EvaluationResult, Failure
from .gemini_api import (
    GeminiCandidate,
    GeminiContent,
    GeminiDecision,
    GeminiGenerationConfig,
    GeminiPart,
    GeminiRequest,
    GeminiResponse,
)
from .item import Item

__all__ = [
    # Base
    "SchemaBase",
    # Items
    "Item",
    # Evaluation
    "Decision",
    "EvaluationResult",
    "Failure",
    # Gemini API
    "GeminiCandidate",
    "GeminiContent",
    "GeminiDecision",
    "GeminiGenerationConfig",
    "GeminiPart",
    "GeminiRequest",
    "GeminiResponse",
    # Persisted state
    "ProcessingCheckpoint",
    "QuotaState",
]
