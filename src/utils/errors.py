"""Custom exception hierarchy for the event search service.

All application exceptions inherit from :class:`EventSearchError`, which
carries an optional ``provider_name`` so error handlers can identify which
backend (e.g. "rapidapi", "fallback") caused the failure.

The hierarchy is organized by how the search pipeline reacts to it:

    EventSearchError  (base -- catch-all for any search error)
    +-- ConfigurationError       (missing/invalid API key or settings, never retried)
    +-- TransientProviderError   (network, timeout, 5xx -- retried with backoff)
    |   +-- RateLimitError       (HTTP 429 -- retried like any transient error)
    +-- AuthError                (HTTP 401/403 -- not retried)
    +-- ParseError               (malformed JSON or unexpected shape -- not retried)
    +-- ProviderRequestError     (any other 4xx -- not retried)
    +-- ProviderUnavailableError (secondary backend failed)
    +-- SearchValidationError    (bad coordinates/radius/date range in a request)

Everything except ``SearchValidationError`` sends the orchestrator to the
fallback backend; a validation error ends the request with an empty result.
"""


class EventSearchError(Exception):
    """Base exception for all event search errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which backend triggered the error.  The
    ``__str__`` method prefixes the provider name in brackets for
    structured log output, e.g. ``[rapidapi] Rate limit exceeded``.
    """

    retryable: bool = False

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Startup / configuration errors
# ---------------------------------------------------------------------------

class ConfigurationError(EventSearchError):
    """Raised when a required setting (e.g. the provider API key) is missing or invalid."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Primary provider errors
# ---------------------------------------------------------------------------

class TransientProviderError(EventSearchError):
    """Raised for network errors, timeouts and 5xx responses.

    The retriever retries these up to its configured attempt budget with
    exponential backoff before giving up and letting the orchestrator fall
    back to the secondary backend.
    """

    retryable = True

    def __init__(
        self,
        message: str = "Provider request failed temporarily",
        provider_name: str | None = None,
        status_code: int | None = None,
    ) -> None:
        self._status_code = status_code
        super().__init__(message=message, provider_name=provider_name)

    @property
    def status_code(self) -> int | None:
        return self._status_code


class RateLimitError(TransientProviderError):
    """Raised when the provider answers HTTP 429."""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        provider_name: str | None = None,
        retry_after: float | None = None,
    ) -> None:
        self._retry_after = retry_after
        super().__init__(message=message, provider_name=provider_name, status_code=429)

    @property
    def retry_after(self) -> float | None:
        return self._retry_after


class AuthError(EventSearchError):
    """Raised on HTTP 401/403 -- the API key was rejected."""

    def __init__(
        self,
        message: str = "Provider rejected the API credentials",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ParseError(EventSearchError):
    """Raised when a provider response is not JSON or lacks the expected shape."""

    def __init__(
        self,
        message: str = "Malformed provider response",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ProviderRequestError(EventSearchError):
    """Raised for 4xx responses other than 401/403/408/429."""

    def __init__(
        self,
        message: str = "Provider rejected the request",
        provider_name: str | None = None,
        status_code: int | None = None,
    ) -> None:
        self._status_code = status_code
        super().__init__(message=message, provider_name=provider_name)

    @property
    def status_code(self) -> int | None:
        return self._status_code


# ---------------------------------------------------------------------------
# Fallback / request errors
# ---------------------------------------------------------------------------

class ProviderUnavailableError(EventSearchError):
    """Raised when the secondary search backend is unreachable or misbehaves."""

    def __init__(
        self,
        message: str = "External service is unavailable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class SearchValidationError(EventSearchError):
    """Raised when a search request has invalid coordinates, radius or dates.

    Fatal to the single request only: the orchestrator answers with an
    empty result and the message, without calling any backend.
    """

    def __init__(
        self,
        message: str = "Invalid search request",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
