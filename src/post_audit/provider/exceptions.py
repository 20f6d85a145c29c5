"""Provider client exceptions."""


class ProviderError(Exception):
    """Base exception for provider client errors."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class TransientProviderError(ProviderError):
    """Base class for errors that should be retried.

    Subclasses of this exception are retried by the scheduler with
    exponential back-off; exhausting the attempts turns them into an
    item-level failure.
    """

    pass


class ProviderRateLimitError(TransientProviderError):
    """Raised when the provider throttles the caller (429)."""

    def __init__(self, message: str, retry_after: float | None = None) -> None:
        super().__init__(message, status_code=429)
        self.retry_after = retry_after


class ProviderServerError(TransientProviderError):
    """Raised on 5xx responses."""

    pass


class ProviderTimeoutError(TransientProviderError):
    """Raised when a request exceeds its timeout."""

    pass


class ProviderConnectionError(TransientProviderError):
    """Raised when the provider cannot be reached."""

    pass


class PermanentProviderError(ProviderError):
    """Base class for errors that are never retried."""

    pass


class ProviderAuthenticationError(PermanentProviderError):
    """Raised when authentication fails (401/403)."""

    pass


class ProviderNotFoundError(PermanentProviderError):
    """Raised when the model or endpoint is not found (404)."""

    pass


class ProviderBadRequestError(PermanentProviderError):
    """Raised on other 4xx responses."""

    pass


class ProviderResponseError(PermanentProviderError):
    """Raised when a successful response does not contain a usable decision."""

    pass
