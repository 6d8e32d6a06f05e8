"""Streaming relay for validated remote resources."""

from collections.abc import Iterator

import httpx
import structlog

from hn30.fetch import FetchConfig, redact_url_credentials
from hn30.fetch.constants import DEFAULT_CHUNK_SIZE
from hn30.proxy.constants import PROXY_CACHE_CONTROL, PROXY_MAX_BYTES, PROXY_NOSNIFF
from hn30.proxy.errors import PayloadTooLargeError, ProxyError, UpstreamFetchError
from hn30.proxy.validate import Resolver, ValidatedURL, resolve_host, validate_url


logger = structlog.get_logger()


def allowed_headers(response: httpx.Response) -> dict[str, str]:
    """Build the headers forwarded to the client.

    Only content-type and content-length come from upstream, plus fixed
    cache and no-sniff directives. Content-length is dropped when the body
    is re-encoded (upstream compression is decoded before relaying).

    Args:
        response: Upstream response.

    Returns:
        Response headers for the client.
    """
    headers: dict[str, str] = {}

    content_type = response.headers.get("content-type")
    if content_type:
        headers["content-type"] = content_type

    content_length = response.headers.get("content-length", "")
    if (
        content_length.isdigit()
        and int(content_length) > 0
        and "content-encoding" not in response.headers
    ):
        headers["content-length"] = content_length

    headers["cache-control"] = PROXY_CACHE_CONTROL
    headers["x-content-type-options"] = PROXY_NOSNIFF
    return headers


def pinned_request(
    client: httpx.Client, target: ValidatedURL, user_agent: str
) -> httpx.Request:
    """Build a request that connects to the validated address only.

    The URL host is replaced by the first address validation resolved, so
    no second lookup happens at connect time. The original name is kept in
    the ``Host`` header and as the TLS SNI/verification name.

    Args:
        client: Client that will send the request.
        target: Validated URL.
        user_agent: User-Agent header value.

    Returns:
        The request to send.
    """
    url = httpx.URL(target.url)
    address = target.addresses[0].split("%", 1)[0]
    pinned_host = f"[{address}]" if ":" in address else address
    return client.build_request(
        "GET",
        url.copy_with(host=pinned_host),
        headers={
            "Host": url.netloc.decode("ascii"),
            "User-Agent": user_agent,
        },
        extensions={"sni_hostname": url.raw_host.decode("ascii")},
    )


class ProxiedResponse:
    """An open upstream response ready to be relayed.

    The body iterator stops at ``max_bytes`` regardless of what upstream
    declared, and releases the connection when exhausted or closed.
    """

    def __init__(
        self,
        client: httpx.Client,
        response: httpx.Response,
        max_bytes: int,
    ) -> None:
        self._client = client
        self._response = response
        self._max_bytes = max_bytes
        self.status_code = response.status_code
        self.headers = allowed_headers(response)
        self.bytes_sent = 0
        self.truncated = False

    def iter_bytes(self) -> Iterator[bytes]:
        """Yield the body, capped at ``max_bytes``."""
        try:
            for chunk in self._response.iter_bytes(chunk_size=DEFAULT_CHUNK_SIZE):
                remaining = self._max_bytes - self.bytes_sent
                if len(chunk) > remaining:
                    if remaining > 0:
                        self.bytes_sent += remaining
                        yield chunk[:remaining]
                    self.truncated = True
                    logger.warning(
                        "proxy_body_truncated",
                        component="proxy",
                        max_bytes=self._max_bytes,
                    )
                    break
                self.bytes_sent += len(chunk)
                yield chunk
        except httpx.HTTPError as e:
            logger.warning("proxy_stream_failed", component="proxy", error=str(e))
        finally:
            self.close()

    def close(self) -> None:
        """Release the upstream connection."""
        self._response.close()
        self._client.close()


class FetchProxy:
    """Validates and relays client-specified remote resources.

    Redirects are never followed: a 3xx from upstream is relayed as-is
    (without its Location header), so every fetched target is one that
    passed validation. Connections go to the validated address itself,
    never to a fresh lookup of the host.
    """

    def __init__(
        self,
        config: FetchConfig | None = None,
        resolver: Resolver = resolve_host,
        transport: httpx.BaseTransport | None = None,
        max_bytes: int = PROXY_MAX_BYTES,
    ) -> None:
        """Initialize the proxy.

        Args:
            config: Fetch configuration (user agent, proxy timeout).
            resolver: Hostname resolver used for validation.
            transport: Optional httpx transport for tests.
            max_bytes: Maximum body size relayed.
        """
        self._config = config or FetchConfig()
        self._resolver = resolver
        self._transport = transport
        self._max_bytes = max_bytes
        self._log = logger.bind(component="proxy")

    def validate(self, raw_url: str) -> ValidatedURL:
        """Validate a URL; see :func:`validate_url`."""
        try:
            return validate_url(raw_url, resolver=self._resolver)
        except ProxyError as e:
            self._log.warning(
                "proxy_validation_failed",
                url=redact_url_credentials(raw_url),
                error=str(e),
            )
            raise

    def open(self, raw_url: str) -> ProxiedResponse:
        """Validate a URL and open its upstream response.

        Args:
            raw_url: URL as received from the client.

        Returns:
            The open response; the caller must exhaust or close it.

        Raises:
            InvalidProxyURLError: If the URL is malformed or unresolvable.
            ForbiddenAddressError: If the URL resolves to an internal address.
            PayloadTooLargeError: If upstream declares an oversized body.
            UpstreamFetchError: If upstream cannot be reached.
        """
        target = self.validate(raw_url)
        log = self._log.bind(url=redact_url_credentials(target.url), host=target.host)

        client = httpx.Client(
            timeout=self._config.proxy_timeout_seconds,
            follow_redirects=False,
            transport=self._transport,
        )
        try:
            request = pinned_request(client, target, self._config.user_agent)
            response = client.send(request, stream=True)
        except httpx.HTTPError as e:
            client.close()
            log.warning("proxy_fetch_failed", error=str(e))
            msg = "Failed to fetch resource"
            raise UpstreamFetchError(msg) from e

        content_length = response.headers.get("content-length", "")
        if content_length.isdigit() and int(content_length) > self._max_bytes:
            response.close()
            client.close()
            log.warning(
                "proxy_payload_too_large",
                content_length=int(content_length),
                max_bytes=self._max_bytes,
            )
            msg = "Resource exceeds maximum size"
            raise PayloadTooLargeError(msg)

        log.info(
            "proxy_fetch_started",
            status_code=response.status_code,
            content_type=response.headers.get("content-type", ""),
        )
        return ProxiedResponse(client, response, self._max_bytes)
