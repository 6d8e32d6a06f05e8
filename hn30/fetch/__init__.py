"""HTTP fetch layer with size limits and failure isolation.

This module provides outbound HTTP GET operations with:
- Per-purpose bounded timeouts
- Maximum response size enforcement
- Credential redaction for logging
- Metrics collection for observability
"""

from hn30.fetch.client import HttpFetcher
from hn30.fetch.config import FetchConfig
from hn30.fetch.constants import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_MAX_RESPONSE_SIZE_BYTES,
    USER_AGENT,
)
from hn30.fetch.metrics import FetchMetrics
from hn30.fetch.models import (
    FetchError,
    FetchErrorClass,
    FetchResult,
    ResponseSizeExceededError,
)
from hn30.fetch.redact import redact_url_credentials


__all__ = [
    # Client
    "HttpFetcher",
    # Config
    "FetchConfig",
    # Models
    "FetchResult",
    "FetchError",
    "FetchErrorClass",
    "ResponseSizeExceededError",
    # Constants
    "DEFAULT_MAX_RESPONSE_SIZE_BYTES",
    "DEFAULT_CHUNK_SIZE",
    "USER_AGENT",
    # Metrics
    "FetchMetrics",
    # Redaction
    "redact_url_credentials",
]
