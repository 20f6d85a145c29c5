"""Async Gemini API client for post evaluation.

This module wraps the Gemini ``generateContent`` REST endpoint and maps
every failure to a classified provider exception. Pacing, quota and retry
are the scheduler's concern; one ``evaluate`` call issues exactly one
HTTP request.
"""

from __future__ import annotations

from typing import Any

import httpx
from pydantic import ValidationError

from post_audit.config import AuditCriteria, ProviderConfig, get_settings
from post_audit.logging import get_logger
from post_audit.schemas import (
    EvaluationResult,
    GeminiContent,
    GeminiDecision,
    GeminiGenerationConfig,
    GeminiPart,
    GeminiRequest,
    GeminiResponse,
    Item,
)

from .exceptions import (
    ProviderAuthenticationError,
    ProviderBadRequestError,
    ProviderConnectionError,
    ProviderError,
    ProviderNotFoundError,
    ProviderRateLimitError,
    ProviderResponseError,
    ProviderServerError,
    ProviderTimeoutError,
)
from .prompts import build_prompt, build_response_schema

logger = get_logger(__name__)

API_KEY_HEADER = "x-goog-api-key"


class GeminiClient:
    """Async Gemini client for post evaluation.

    Usage:
        async with GeminiClient() as client:
            result = await client.evaluate(item, criteria)
            if result.is_flagged:
                print(result.reason)

    Or without context manager:
        client = GeminiClient()
        result = await client.evaluate(item, criteria)
        await client.close()
    """

    def __init__(
        self,
        api_key: str | None = None,
        config: ProviderConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the Gemini client.

        Args:
            api_key: Gemini API key. If not provided, uses GEMINI_API_KEY from settings.
            config: Optional provider configuration (uses settings if not provided)
            transport: Optional httpx transport (used by tests to stub the API)

        Raises:
            ProviderAuthenticationError: If no API key is available.
        """
        self._api_key = api_key or get_settings().gemini_api_key
        if not self._api_key:
            raise ProviderAuthenticationError(
                "Gemini API key required. Set GEMINI_API_KEY environment variable."
            )
        self._config = config or get_settings().provider
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def config(self) -> ProviderConfig:
        """Get the provider configuration."""
        return self._config

    @property
    def endpoint(self) -> str:
        """Relative URL of the generateContent call."""
        return f"/models/{self._config.model}:generateContent"

    @property
    def _http(self) -> httpx.AsyncClient:
        """Get or create the underlying HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._config.base_url,
                headers={API_KEY_HEADER: self._api_key, "Content-Type": "application/json"},
                timeout=self._config.timeout_seconds,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> GeminiClient:
        """Async context manager entry."""
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Async context manager exit."""
        await self.close()

    # -------------------------------------------------------------------------
    # Evaluation
    # -------------------------------------------------------------------------
    def build_request(self, item: Item, criteria: AuditCriteria) -> GeminiRequest:
        """Build the generateContent request for one post."""
        return GeminiRequest(
            contents=[GeminiContent(parts=[GeminiPart(text=build_prompt(item, criteria))])],
            generation_config=GeminiGenerationConfig(
                response_json_schema=build_response_schema(),
                temperature=self._config.temperature,
            ),
        )

    async def evaluate(self, item: Item, criteria: AuditCriteria) -> EvaluationResult:
        """Evaluate one post against the criteria.

        Args:
            item: Post to evaluate
            criteria: Alignment criteria

        Returns:
            EvaluationResult carrying the provider's decision

        Raises:
            TransientProviderError: On 429, 5xx, timeouts and connection failures
            PermanentProviderError: On other 4xx responses or an unusable reply
        """
        logger.debug("Evaluating post {}", item.id)
        payload = self.build_request(item, criteria).to_payload()

        try:
            response = await self._http.post(self.endpoint, json=payload)
        except httpx.TimeoutException as e:
            raise ProviderTimeoutError(f"Request timed out after {self._config.timeout_seconds}s") from e
        except httpx.TransportError as e:
            raise ProviderConnectionError(f"Connection to provider failed: {e}") from e

        if response.is_error:
            raise self._handle_error(response)

        return self._parse_response(response, item.id)

    def _parse_response(self, response: httpx.Response, item_id: str) -> EvaluationResult:
        try:
            body = GeminiResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise ProviderResponseError(f"Malformed response body: {e}", response.status_code) from e

        if not body.candidates:
            raise ProviderResponseError("No candidates in provider response", response.status_code)
        text = body.first_text()
        if text is None:
            raise ProviderResponseError("No parts in candidate content", response.status_code)

        try:
            decision = GeminiDecision.model_validate_json(text)
        except ValidationError as e:
            raise ProviderResponseError(f"Decision does not match schema: {e}", response.status_code) from e

        return EvaluationResult.from_decision(
            item_id,
            should_flag=decision.should_flag,
            rationale=decision.rationale,
            matched_criteria=decision.matched_criteria,
        )

    # -------------------------------------------------------------------------
    # Error Handling
    # -------------------------------------------------------------------------
    def _handle_error(self, response: httpx.Response) -> ProviderError:
        """Convert an error response to a classified provider exception."""
        status = response.status_code
        detail = _error_detail(response)

        if status == 429:
            return ProviderRateLimitError(
                f"Provider rate limit exceeded: {detail}",
                retry_after=_parse_retry_after(response.headers.get("retry-after")),
            )
        elif status >= 500:
            return ProviderServerError(f"Provider server error ({status}): {detail}", status)
        elif status in (401, 403):
            return ProviderAuthenticationError(f"Provider rejected credentials ({status}): {detail}", status)
        elif status == 404:
            return ProviderNotFoundError(f"Model or endpoint not found: {detail}", status)
        else:
            return ProviderBadRequestError(f"Provider rejected request ({status}): {detail}", status)


def _error_detail(response: httpx.Response) -> str:
    try:
        body: Any = response.json()
    except ValueError:
        return response.text[:200] or response.reason_phrase
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        return str(body["error"].get("message", body["error"]))
    return str(body)[:200]


def _parse_retry_after(value: str | None) -> float | None:
    if value is None:
        return None
    try:
        return max(0.0, float(value))
    except ValueError:
        return None
