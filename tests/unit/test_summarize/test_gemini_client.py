"""Unit tests for the Gemini API client."""

import httpx
import pytest

from hn30.summarize import GeminiApiKeyClient, LlmApiError


def _ok(text: str) -> httpx.Response:
    return httpx.Response(
        200,
        json={"candidates": [{"content": {"parts": [{"text": text}]}}]},
    )


class ScriptedHandler:
    """Returns queued responses in order."""

    def __init__(self, *responses: httpx.Response) -> None:
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responses.pop(0)


def _client(handler: ScriptedHandler, sleeps: list[float]) -> GeminiApiKeyClient:
    return GeminiApiKeyClient(
        "api-key", transport=httpx.MockTransport(handler), sleep=sleeps.append
    )


class TestGenerateContent:
    """Tests for generate_content."""

    def test_success(self) -> None:
        """Test that the candidate text is returned and the key sent."""
        handler = ScriptedHandler(_ok("  A summary.  "))
        sleeps: list[float] = []

        text = _client(handler, sleeps).generate_content("prompt")

        assert text == "A summary."
        assert handler.requests[0].headers["x-goog-api-key"] == "api-key"
        assert handler.requests[0].url.path.endswith(
            "/gemini-2.0-flash-lite:generateContent"
        )
        assert sleeps == []

    def test_joins_multiple_parts(self) -> None:
        """Test that multi-part candidates are concatenated."""
        handler = ScriptedHandler(
            httpx.Response(
                200,
                json={
                    "candidates": [
                        {"content": {"parts": [{"text": "One. "}, {"text": "Two."}]}}
                    ]
                },
            )
        )

        assert _client(handler, []).generate_content("p") == "One. Two."

    def test_retries_rate_limit(self) -> None:
        """Test that a 429 is retried after a backoff sleep."""
        handler = ScriptedHandler(httpx.Response(429), _ok("done"))
        sleeps: list[float] = []

        text = _client(handler, sleeps).generate_content("prompt")

        assert text == "done"
        assert len(sleeps) == 1
        assert len(handler.requests) == 2

    def test_gives_up_after_max_retries(self) -> None:
        """Test that persistent 503s raise once retries run out."""
        handler = ScriptedHandler(
            httpx.Response(503), httpx.Response(503), httpx.Response(503)
        )
        sleeps: list[float] = []

        with pytest.raises(LlmApiError) as exc_info:
            _client(handler, sleeps).generate_content("prompt")

        assert exc_info.value.status_code == 503
        assert len(sleeps) == 2

    def test_non_retryable_status(self) -> None:
        """Test that a 400 fails immediately."""
        handler = ScriptedHandler(httpx.Response(400))
        sleeps: list[float] = []

        with pytest.raises(LlmApiError) as exc_info:
            _client(handler, sleeps).generate_content("prompt")

        assert exc_info.value.status_code == 400
        assert sleeps == []

    def test_no_candidates(self) -> None:
        """Test that an empty candidate list is an error."""
        handler = ScriptedHandler(httpx.Response(200, json={"candidates": []}))

        with pytest.raises(LlmApiError, match="No candidates"):
            _client(handler, []).generate_content("prompt")
