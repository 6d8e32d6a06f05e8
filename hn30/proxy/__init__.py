"""SSRF-hardened content fetch proxy."""

from hn30.proxy.constants import PROXY_CACHE_CONTROL, PROXY_MAX_BYTES, PROXY_NOSNIFF
from hn30.proxy.errors import (
    ForbiddenAddressError,
    InvalidProxyURLError,
    PayloadTooLargeError,
    ProxyError,
    UpstreamFetchError,
)
from hn30.proxy.relay import (
    FetchProxy,
    ProxiedResponse,
    allowed_headers,
    pinned_request,
)
from hn30.proxy.validate import (
    ValidatedURL,
    is_forbidden_address,
    resolve_host,
    validate_url,
)


__all__ = [
    "PROXY_CACHE_CONTROL",
    "PROXY_MAX_BYTES",
    "PROXY_NOSNIFF",
    "FetchProxy",
    "ForbiddenAddressError",
    "InvalidProxyURLError",
    "PayloadTooLargeError",
    "ProxiedResponse",
    "ProxyError",
    "UpstreamFetchError",
    "ValidatedURL",
    "allowed_headers",
    "is_forbidden_address",
    "pinned_request",
    "resolve_host",
    "validate_url",
]
