"""Error types for the content fetch proxy.

Each error carries the HTTP status the API answers with.
"""


class ProxyError(Exception):
    """Base exception for proxy failures."""

    status_code = 500


class InvalidProxyURLError(ProxyError):
    """URL is malformed, uses a disallowed scheme or cannot be resolved."""

    status_code = 400


class ForbiddenAddressError(ProxyError):
    """URL resolves to an internal address."""

    status_code = 400


class PayloadTooLargeError(ProxyError):
    """Upstream declares a body above the size cap."""

    status_code = 413


class UpstreamFetchError(ProxyError):
    """Upstream could not be reached or failed mid-request."""

    status_code = 502
