"""HTTP constants for the fetch layer.

Centralizes all HTTP-related constants to avoid duplication across modules.
"""

# HTTP Status Code Ranges
HTTP_STATUS_OK_MIN = 200
HTTP_STATUS_OK_MAX = 300
HTTP_STATUS_BAD_REQUEST = 400
HTTP_STATUS_SERVER_ERROR_MIN = 500
HTTP_STATUS_SERVER_ERROR_MAX = 600

# Response Size Limits
DEFAULT_MAX_RESPONSE_SIZE_BYTES = 10 * 1024 * 1024  # 10 MiB

# Chunk size for streaming reads
DEFAULT_CHUNK_SIZE = 8192

USER_AGENT = "hn30/2.0 (+https://hn30.yamanlabs.com)"

# Per-purpose timeouts (seconds)
SOURCE_TIMEOUT_SECONDS = 10.0
ENRICHMENT_TIMEOUT_SECONDS = 8.0
ARTICLE_TIMEOUT_SECONDS = 10.0
PROXY_TIMEOUT_SECONDS = 30.0
