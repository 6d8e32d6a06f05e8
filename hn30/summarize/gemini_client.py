"""Gemini API client using API key authentication."""

import random
import time
from collections.abc import Callable
from http import HTTPStatus

import httpx
import structlog

from hn30.summarize.errors import LlmApiError


logger = structlog.get_logger()

_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"

DEFAULT_MODEL = "gemini-2.0-flash-lite"
MODEL_TIMEOUT_SECONDS = 60.0

_MAX_RETRIES = 2
_RETRY_BASE_DELAY = 2.0
_RETRYABLE_STATUS_CODES = {HTTPStatus.TOO_MANY_REQUESTS, HTTPStatus.SERVICE_UNAVAILABLE}


class GeminiApiKeyClient:
    """Client for the Gemini ``generateContent`` endpoint.

    Authenticates with an ``x-goog-api-key`` header and retries with
    exponential backoff on 429/503 responses.
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] = time.sleep,
        timeout: float = MODEL_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize the client.

        Args:
            api_key: Gemini API key.
            model: Gemini model identifier.
            transport: Optional httpx transport for tests.
            sleep: Backoff sleep function.
            timeout: Request timeout in seconds.
        """
        self._api_key = api_key
        self.model = model
        self._transport = transport
        self._sleep = sleep
        self._timeout = timeout
        self._log = logger.bind(component="summarize", subcomponent="gemini_api_key")

    def generate_content(self, prompt: str) -> str:
        """Send a generate content request to the Gemini API.

        Args:
            prompt: User prompt text.

        Returns:
            Generated text from the model response.

        Raises:
            LlmApiError: If the API call fails after all retries.
        """
        url = f"{_BASE_URL}/{self.model}:generateContent"
        request_body = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}

        last_exc: LlmApiError | None = None

        with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
            for attempt in range(_MAX_RETRIES + 1):
                try:
                    response = client.post(
                        url,
                        headers={"x-goog-api-key": self._api_key},
                        json=request_body,
                    )
                except httpx.HTTPError as exc:
                    msg = f"Gemini API request failed: {exc}"
                    raise LlmApiError(msg) from exc

                if response.status_code == HTTPStatus.OK:
                    break

                if (
                    response.status_code in _RETRYABLE_STATUS_CODES
                    and attempt < _MAX_RETRIES
                ):
                    delay = _RETRY_BASE_DELAY * (2**attempt) + random.uniform(0, 1)  # noqa: S311
                    self._log.warning(
                        "gemini_retryable_error",
                        status=response.status_code,
                        attempt=attempt + 1,
                        retry_delay=round(delay, 1),
                    )
                    self._sleep(delay)
                    last_exc = LlmApiError(
                        f"Gemini API returned {response.status_code}",
                        status_code=response.status_code,
                    )
                    continue

                msg = f"Gemini API returned {response.status_code}"
                raise LlmApiError(msg, status_code=response.status_code)
            else:
                raise last_exc or LlmApiError("All retries exhausted")

        data = response.json()
        candidates = data.get("candidates", [])
        if not candidates:
            msg = "No candidates in Gemini API response"
            raise LlmApiError(msg)

        parts = candidates[0].get("content", {}).get("parts", [])
        text = "".join(part.get("text", "") for part in parts).strip()
        if not text:
            msg = "Empty text in response"
            raise LlmApiError(msg)

        return text
