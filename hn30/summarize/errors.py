"""Domain-specific error types for summarization."""


class SummarizationError(Exception):
    """Summary could not be produced for a cached item."""


class StoryNotFoundError(SummarizationError):
    """The requested id is not in the current snapshot.

    Attributes:
        item_id: The id that was requested.
    """

    def __init__(self, item_id: int) -> None:
        self.item_id = item_id
        super().__init__(f"Story not found: {item_id}")


class LlmApiError(SummarizationError):
    """Model API call failure.

    Attributes:
        status_code: HTTP status code from the API response.
    """

    def __init__(self, message: str, status_code: int = 0) -> None:
        super().__init__(message)
        self.status_code = status_code
