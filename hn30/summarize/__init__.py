"""Article summaries via the Gemini API."""

from hn30.summarize.errors import LlmApiError, StoryNotFoundError, SummarizationError
from hn30.summarize.gemini_client import DEFAULT_MODEL, GeminiApiKeyClient
from hn30.summarize.models import SummaryResult
from hn30.summarize.prompts import SUMMARY_PROMPT, build_summary_prompt
from hn30.summarize.summarizer import Summarizer


__all__ = [
    "DEFAULT_MODEL",
    "SUMMARY_PROMPT",
    "GeminiApiKeyClient",
    "LlmApiError",
    "StoryNotFoundError",
    "SummarizationError",
    "Summarizer",
    "SummaryResult",
    "build_summary_prompt",
]
