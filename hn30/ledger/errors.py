"""Domain exceptions for the notification ledger and its replica.

Infrastructure errors (database connectivity, migrations) are separated
from replica errors, which are always best-effort.
"""


class LedgerError(Exception):
    """Base exception for all ledger errors."""


class LedgerConnectionError(LedgerError):
    """Raised when the database cannot be opened or is not connected."""

    def __init__(self, message: str = "Database not connected") -> None:
        """Initialize the connection error.

        Args:
            message: Human-readable error message.
        """
        super().__init__(message)


class MigrationError(LedgerError):
    """Raised when a schema migration fails."""

    def __init__(self, version: int, message: str) -> None:
        """Initialize the migration error.

        Args:
            version: The migration version that failed.
            message: Human-readable error message.
        """
        self.version = version
        super().__init__(f"Migration {version} failed: {message}")


class ReplicaError(Exception):
    """Raised when mirroring to the secondary replica fails.

    Attributes:
        status_code: HTTP status code from the replica, 0 if none.
    """

    def __init__(self, message: str, status_code: int = 0) -> None:
        super().__init__(message)
        self.status_code = status_code
