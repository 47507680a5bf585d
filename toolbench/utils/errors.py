"""Custom exception hierarchy for toolbench.

All application exceptions inherit from :class:`ToolbenchError`, which
carries an optional ``provider_name`` so error handlers can identify which
vendor (e.g. "replicate", "runway", "elevenlabs") caused the failure, and
an HTTP ``status_code`` that the error middleware relays to the client.

    ToolbenchError  (base -- catch-all, 500)
    +-- ConfigurationError       (vendor key or setting missing, 500)
    +-- ProviderError            (vendor returned a non-2xx, relays its status)
    +-- GenerationFailedError    (vendor reported failed/canceled, 500)
    +-- GenerationTimeoutError   (status polling exhausted, 504)
    +-- RateLimitError           (per-client request budget exceeded, 429)
    +-- StorageError             (blob store read/write failure, 500)
    +-- NotFoundError            (unknown feedback id etc., 404)
    +-- AuthenticationError      (missing/invalid session, 401)

Callers handle errors at the right level: routes let them propagate to
``ErrorHandlingMiddleware``; the image service inspects messages to decide
whether a retry is worthwhile.
"""


class ToolbenchError(Exception):
    """Base exception for all toolbench errors.

    Every subclass carries a human-readable ``message``, an optional
    ``provider_name`` and the HTTP ``status_code`` to answer with.  The
    ``__str__`` method prefixes the provider name in brackets for log
    output, e.g. ``[runway] Failed to get task status: 404``.
    """

    default_status_code = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
        status_code: int | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        self._status_code = status_code or self.default_status_code
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    @property
    def status_code(self) -> int:
        return self._status_code

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

class ConfigurationError(ToolbenchError):
    """Raised when a vendor key or required setting is missing."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name, status_code=status_code)


# ---------------------------------------------------------------------------
# Vendor / generation errors
# ---------------------------------------------------------------------------

class ProviderError(ToolbenchError):
    """Raised when a vendor API answers with a non-2xx status.

    ``status_code`` is the upstream status so the client sees the same
    code the vendor returned (e.g. 422 for a rejected Replicate input).
    """

    default_status_code = 502

    def __init__(
        self,
        message: str = "Vendor API request failed",
        provider_name: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name, status_code=status_code)


class GenerationFailedError(ToolbenchError):
    """Raised when a vendor reports a generation task as failed or canceled."""

    def __init__(
        self,
        message: str = "Generation failed",
        provider_name: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name, status_code=status_code)


class GenerationTimeoutError(ToolbenchError):
    """Raised when polling a vendor task runs out of attempts."""

    default_status_code = 504

    def __init__(
        self,
        message: str = "Generation timed out",
        provider_name: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name, status_code=status_code)


class RateLimitError(ToolbenchError):
    """Raised when a client exceeds its request budget.

    ``reset_at`` is the epoch time (seconds) at which the window resets.
    """

    default_status_code = 429

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        provider_name: str | None = None,
        status_code: int | None = None,
        limit: int = 0,
        reset_at: float = 0.0,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name, status_code=status_code)
        self.limit = limit
        self.reset_at = reset_at


# ---------------------------------------------------------------------------
# Storage / lookup / auth
# ---------------------------------------------------------------------------

class StorageError(ToolbenchError):
    """Raised when the blob store or feedback database cannot be read or written."""

    def __init__(
        self,
        message: str = "Storage operation failed",
        provider_name: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name, status_code=status_code)


class NotFoundError(ToolbenchError):
    """Raised when a requested record does not exist."""

    default_status_code = 404

    def __init__(
        self,
        message: str = "Not found",
        provider_name: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name, status_code=status_code)


class AuthenticationError(ToolbenchError):
    """Raised when sign-in fails or a session is missing."""

    default_status_code = 401

    def __init__(
        self,
        message: str = "Authentication required",
        provider_name: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name, status_code=status_code)
