"""Generative-AI provider integration.

Components:
- GeminiClient: Async client for the Gemini generateContent endpoint
- build_prompt / build_response_schema: Request construction
- Provider exceptions, split into transient and permanent failures
"""

from .client import GeminiClient
from .exceptions import (
    PermanentProviderError,
    ProviderAuthenticationError,
    ProviderBadRequestError,
    ProviderConnectionError,
    ProviderError,
    ProviderNotFoundError,
    ProviderRateLimitError,
    ProviderResponseError,
    ProviderServerError,
    ProviderTimeoutError,
    TransientProviderError,
)
from .prompts import build_prompt, build_response_schema

__all__ = [
    # Client
    "GeminiClient",
    "build_prompt",
    "build_response_schema",
    # Exceptions
    "PermanentProviderError",
    "ProviderAuthenticationError",
    "ProviderBadRequestError",
    "ProviderConnectionError",
    "ProviderError",
    "ProviderNotFoundError",
    "ProviderRateLimitError",
    "ProviderResponseError",
    "ProviderServerError",
    "ProviderTimeoutError",
    "TransientProviderError",
]
