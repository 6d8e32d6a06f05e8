"""Error types for the ranking source."""


class SourceError(Exception):
    """Ranking or item fetch failure.

    Attributes:
        item_id: Item being fetched, or None for the ranking list.
        status_code: HTTP status code if a response was received.
    """

    def __init__(
        self,
        message: str,
        item_id: int | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.item_id = item_id
        self.status_code = status_code
