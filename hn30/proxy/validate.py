"""URL validation against SSRF targets."""

import ipaddress
import socket
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from urllib.parse import urlsplit

from hn30.proxy.constants import ALLOWED_SCHEMES, FORBIDDEN_NETWORKS
from hn30.proxy.errors import ForbiddenAddressError, InvalidProxyURLError


Resolver = Callable[[str], Iterable[str]]

IPAddress = ipaddress.IPv4Address | ipaddress.IPv6Address

_FORBIDDEN = tuple(ipaddress.ip_network(cidr) for cidr in FORBIDDEN_NETWORKS)


@dataclass(frozen=True)
class ValidatedURL:
    """A URL that passed validation, with the addresses it resolved to."""

    url: str
    host: str
    addresses: tuple[str, ...]


def resolve_host(host: str) -> list[str]:
    """Resolve a hostname to its address set using the system resolver.

    Args:
        host: Hostname or IP literal.

    Returns:
        Distinct addresses as strings.

    Raises:
        OSError: If resolution fails.
    """
    infos = socket.getaddrinfo(host, None, proto=socket.IPPROTO_TCP)
    return sorted({str(info[4][0]) for info in infos})


def is_forbidden_address(address: IPAddress) -> bool:
    """Check whether an address is internal.

    Args:
        address: Parsed IP address.

    Returns:
        True for loopback, link-local, unspecified and private ranges,
        including IPv4 addresses embedded as IPv4-mapped IPv6.
    """
    if isinstance(address, ipaddress.IPv6Address) and address.ipv4_mapped is not None:
        return is_forbidden_address(address.ipv4_mapped)

    if address.is_loopback or address.is_link_local or address.is_unspecified:
        return True

    return any(
        address.version == network.version and address in network
        for network in _FORBIDDEN
    )


def validate_url(raw_url: str, resolver: Resolver = resolve_host) -> ValidatedURL:
    """Validate a client-supplied URL before fetching it.

    Args:
        raw_url: URL as received from the client.
        resolver: Hostname resolver.

    Returns:
        The validated URL. Callers must connect to one of its ``addresses``
        rather than resolving the host again, or a rebinding resolver could
        hand out an internal address after validation.

    Raises:
        InvalidProxyURLError: If the URL is malformed, not http(s), or
            does not resolve.
        ForbiddenAddressError: If any resolved address is internal.
    """
    try:
        parts = urlsplit(raw_url)
        host = parts.hostname
        _ = parts.port
    except ValueError as e:
        msg = "invalid URL format"
        raise InvalidProxyURLError(msg) from e

    if parts.scheme.lower() not in ALLOWED_SCHEMES:
        msg = f"invalid URL scheme: {parts.scheme}"
        raise InvalidProxyURLError(msg)

    if not host:
        msg = "invalid URL format"
        raise InvalidProxyURLError(msg)

    try:
        resolved = list(resolver(host))
    except OSError as e:
        msg = f"could not resolve hostname: {host}"
        raise InvalidProxyURLError(msg) from e

    if not resolved:
        msg = f"could not resolve hostname: {host}"
        raise InvalidProxyURLError(msg)

    for raw_address in resolved:
        try:
            address = ipaddress.ip_address(raw_address.split("%", 1)[0])
        except ValueError as e:
            msg = f"could not resolve hostname: {host}"
            raise InvalidProxyURLError(msg) from e
        if is_forbidden_address(address):
            msg = "denied: URL resolves to a private IP address"
            raise ForbiddenAddressError(msg)

    return ValidatedURL(url=raw_url, host=host, addresses=tuple(resolved))
