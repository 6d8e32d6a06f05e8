"""HTTP client with size limits and failure classification."""

import time
from io import BytesIO
from urllib.parse import urlparse

import httpx
import structlog

from hn30.fetch.config import FetchConfig
from hn30.fetch.constants import (
    DEFAULT_CHUNK_SIZE,
    HTTP_STATUS_BAD_REQUEST,
    HTTP_STATUS_OK_MAX,
    HTTP_STATUS_OK_MIN,
    HTTP_STATUS_SERVER_ERROR_MAX,
    HTTP_STATUS_SERVER_ERROR_MIN,
)
from hn30.fetch.metrics import FetchMetrics
from hn30.fetch.models import (
    FetchError,
    FetchErrorClass,
    FetchResult,
    ResponseSizeExceededError,
)
from hn30.fetch.redact import redact_url_credentials


logger = structlog.get_logger()


class HttpFetcher:
    """HTTP client with bounded timeouts and failure isolation.

    Provides HTTP GET operations with:
    - Per-call timeouts
    - Maximum response size enforcement (advertised and streamed)
    - Typed error results instead of exceptions
    - Metrics collection

    Failures never raise; callers inspect ``FetchResult.error``.
    """

    def __init__(
        self,
        config: FetchConfig | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the HTTP fetcher.

        Args:
            config: Fetch configuration.
            transport: Optional httpx transport (tests inject a MockTransport).
        """
        self._config = config or FetchConfig()
        self._transport = transport
        self._metrics = FetchMetrics.get_instance()
        self._log = logger.bind(component="fetch")

    @property
    def config(self) -> FetchConfig:
        """Get the fetch configuration."""
        return self._config

    def get(
        self,
        url: str,
        timeout: float,
        extra_headers: dict[str, str] | None = None,
    ) -> FetchResult:
        """Fetch a URL.

        Args:
            url: The URL to fetch.
            timeout: Request timeout in seconds.
            extra_headers: Additional headers to include.

        Returns:
            FetchResult with status, body and error information.
        """
        start_time_ns = time.perf_counter_ns()
        log = self._log.bind(
            url=redact_url_credentials(url),
            domain=urlparse(url).netloc,
        )

        headers = {"User-Agent": self._config.user_agent, "Accept": "*/*"}
        if extra_headers:
            headers.update(extra_headers)

        result = self._execute(url, headers, timeout)

        duration_ms = (time.perf_counter_ns() - start_time_ns) / 1_000_000
        self._metrics.record_duration(duration_ms)
        if result.error is not None:
            self._metrics.record_failure(result.error.error_class)

        log.debug(
            "fetch_complete",
            status_code=result.status_code,
            bytes=result.body_size,
            duration_ms=round(duration_ms, 2),
            error_class=result.error.error_class.value if result.error else None,
        )

        return result

    def _execute(
        self,
        url: str,
        headers: dict[str, str],
        timeout: float,
    ) -> FetchResult:
        """Execute a single HTTP request.

        Args:
            url: URL to fetch.
            headers: Request headers.
            timeout: Request timeout in seconds.

        Returns:
            FetchResult from the request.
        """
        max_size = self._config.max_response_size_bytes

        try:
            with (
                httpx.Client(
                    timeout=timeout,
                    follow_redirects=True,
                    transport=self._transport,
                ) as client,
                client.stream("GET", url, headers=headers) as response,
            ):
                response_headers = {k.lower(): v for k, v in response.headers.items()}
                content_length = response.headers.get("content-length")
                if content_length and content_length.isdigit():
                    size = int(content_length)
                    if size > max_size:
                        return self._error_result(
                            url,
                            FetchErrorClass.RESPONSE_SIZE_EXCEEDED,
                            f"Response size {size} exceeds limit {max_size}",
                            status_code=response.status_code,
                        )

                body = self._read_body_with_limit(response)
                self._metrics.record_request(response.status_code, len(body))

                return FetchResult(
                    status_code=response.status_code,
                    final_url=str(response.url),
                    headers=response_headers,
                    body_bytes=body,
                    error=self._classify_http_error(response.status_code),
                )

        except ResponseSizeExceededError as e:
            return self._error_result(
                url, FetchErrorClass.RESPONSE_SIZE_EXCEEDED, str(e)
            )

        except httpx.TimeoutException as e:
            return self._error_result(
                url, FetchErrorClass.NETWORK_TIMEOUT, f"Request timed out: {e}"
            )

        except httpx.ConnectError as e:
            return self._error_result(
                url, FetchErrorClass.CONNECTION_ERROR, f"Connection failed: {e}"
            )

        except Exception as e:  # noqa: BLE001
            return self._error_result(
                url, FetchErrorClass.UNKNOWN, f"Unexpected error: {e}"
            )

    def _error_result(
        self,
        url: str,
        error_class: FetchErrorClass,
        message: str,
        status_code: int | None = None,
    ) -> FetchResult:
        """Build a FetchResult carrying only an error.

        Args:
            url: Requested URL.
            error_class: Classification of the failure.
            message: Human-readable message.
            status_code: HTTP status if a response was received.

        Returns:
            FetchResult with an empty body.
        """
        return FetchResult(
            status_code=status_code or 0,
            final_url=url,
            error=FetchError(
                error_class=error_class,
                message=message,
                status_code=status_code,
            ),
        )

    def _read_body_with_limit(self, response: httpx.Response) -> bytes:
        """Read response body with size limit.

        Args:
            response: Streaming HTTP response.

        Returns:
            Response body bytes.

        Raises:
            ResponseSizeExceededError: If the size limit is exceeded.
        """
        buffer = BytesIO()
        total_read = 0
        max_size = self._config.max_response_size_bytes

        for chunk in response.iter_bytes(chunk_size=DEFAULT_CHUNK_SIZE):
            total_read += len(chunk)
            if total_read > max_size:
                msg = (
                    f"Response size exceeded limit of {max_size} bytes "
                    f"(read {total_read} bytes)"
                )
                raise ResponseSizeExceededError(msg)
            buffer.write(chunk)

        return buffer.getvalue()

    def _classify_http_error(self, status_code: int) -> FetchError | None:
        """Classify HTTP status code as error.

        Args:
            status_code: HTTP status code.

        Returns:
            FetchError if status indicates error, None otherwise.
        """
        if HTTP_STATUS_OK_MIN <= status_code < HTTP_STATUS_OK_MAX:
            return None

        if HTTP_STATUS_BAD_REQUEST <= status_code < HTTP_STATUS_SERVER_ERROR_MIN:
            return FetchError(
                error_class=FetchErrorClass.HTTP_4XX,
                message=f"Client error ({status_code})",
                status_code=status_code,
            )

        if HTTP_STATUS_SERVER_ERROR_MIN <= status_code < HTTP_STATUS_SERVER_ERROR_MAX:
            return FetchError(
                error_class=FetchErrorClass.HTTP_5XX,
                message=f"Server error ({status_code})",
                status_code=status_code,
            )

        return None
