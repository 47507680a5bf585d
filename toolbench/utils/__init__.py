"""Utility modules for toolbench.

- **errors** -- Exception hierarchy rooted at ToolbenchError; every error
  carries the HTTP status the error middleware answers with.
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output in development, structured JSON in production.
- **media** -- data-URL parsing and Pillow JPEG re-encoding.
- **rate_limit** -- fixed-window per-IP request limiter.
- **retry** -- exponential backoff around flaky vendor calls.
"""

# -- Exception hierarchy ----------------------------------------------------
from toolbench.utils.errors import (
    AuthenticationError,
    ConfigurationError,
    GenerationFailedError,
    GenerationTimeoutError,
    NotFoundError,
    ProviderError,
    RateLimitError,
    StorageError,
    ToolbenchError,
)

# -- Structured logging setup ----------------------------------------------
from toolbench.utils.logging import configure_logging, get_logger

# -- Media helpers ----------------------------------------------------------
from toolbench.utils.media import compress_image, estimate_base64_size, parse_data_url, to_data_url

# -- Request limiting and retry ---------------------------------------------
from toolbench.utils.rate_limit import RateLimiter, RateLimitResult, get_client_ip
from toolbench.utils.retry import retry_with_backoff

__all__ = [
    "AuthenticationError",
    "ConfigurationError",
    "GenerationFailedError",
    "GenerationTimeoutError",
    "NotFoundError",
    "ProviderError",
    "RateLimitError",
    "RateLimitResult",
    "RateLimiter",
    "StorageError",
    "ToolbenchError",
    "compress_image",
    "configure_logging",
    "estimate_base64_size",
    "get_client_ip",
    "get_logger",
    "parse_data_url",
    "retry_with_backoff",
    "to_data_url",
]
