"""Client identity resolution for rate limiting."""

from collections.abc import Mapping

from hn30.ratelimit.constants import UNKNOWN_IDENTITY


def client_identity(headers: Mapping[str, str], peer_host: str | None) -> str:
    """Derive the rate-limit identity for a request.

    Uses the first address in ``X-Forwarded-For`` (the original client
    behind a reverse proxy), falling back to the transport peer.

    Args:
        headers: Request headers (case-insensitive mapping).
        peer_host: Transport-level peer address, if known.

    Returns:
        Identity string.
    """
    forwarded = headers.get("x-forwarded-for", "")
    first = forwarded.split(",")[0].strip()
    if first:
        return first
    return peer_host or UNKNOWN_IDENTITY
