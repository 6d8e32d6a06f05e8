"""SQLite notification ledger."""

import sqlite3
import threading
import time
import uuid
from collections.abc import Callable, Generator
from contextlib import contextmanager
from pathlib import Path

import structlog

from hn30.ledger.constants import NOTIFY_MIN_AGE_SECONDS, NOTIFY_MIN_SCORE
from hn30.ledger.errors import LedgerConnectionError, LedgerError
from hn30.ledger.migrations import MigrationManager
from hn30.ledger.models import LedgerRecord, LedgerStats
from hn30.source import Item


logger = structlog.get_logger()


class LedgerStore:
    """Durable per-item record backing the notify-once decision.

    Provides the three operations the refresh engine needs: upsert with
    merge, an eligibility query, and mark-notified. The connection is
    shared between the refresh worker and CLI/API callers, so every
    statement runs under one lock.
    """

    def __init__(
        self,
        db_path: Path | str,
        clock: Callable[[], float] = time.time,
        min_age_seconds: int = NOTIFY_MIN_AGE_SECONDS,
        min_score: int = NOTIFY_MIN_SCORE,
    ) -> None:
        """Initialize the ledger.

        Args:
            db_path: Path to the SQLite database file.
            clock: Returns the current unix time in seconds.
            min_age_seconds: Minimum age before an item may notify.
            min_score: Minimum running-max score to notify.
        """
        self._db_path = Path(db_path)
        self._clock = clock
        self._min_age_seconds = min_age_seconds
        self._min_score = min_score
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.Lock()
        self._log = logger.bind(component="ledger", db_path=str(self._db_path))

    @property
    def db_path(self) -> Path:
        """Get the database path."""
        return self._db_path

    @property
    def is_connected(self) -> bool:
        """Check if connected to database."""
        return self._conn is not None

    def connect(self) -> None:
        """Open the database and apply migrations.

        Creates the database file and parent directories if needed.

        Raises:
            LedgerConnectionError: If the database cannot be opened.
            MigrationError: If the schema cannot be migrated.
        """
        if self._conn is not None:
            return

        self._log.info("connecting_to_database")

        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(
                str(self._db_path), timeout=5.0, check_same_thread=False
            )
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute("PRAGMA synchronous=NORMAL")
            conn.execute("PRAGMA foreign_keys=ON")
        except (OSError, sqlite3.Error) as e:
            self._log.error("database_connect_failed", error=str(e))
            msg = f"Cannot open ledger at {self._db_path}: {e}"
            raise LedgerConnectionError(msg) from e

        migration_mgr = MigrationManager(conn)
        try:
            old_version = migration_mgr.get_current_version()
            applied = migration_mgr.apply_migrations()
        except sqlite3.Error as e:
            conn.close()
            msg = f"Cannot read schema version: {e}"
            raise LedgerConnectionError(msg) from e
        except LedgerError:
            conn.close()
            raise

        self._conn = conn
        self._log.info(
            "database_connected",
            old_version=old_version,
            migrations_applied=applied,
        )

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None
                self._log.info("database_closed")

    def __enter__(self) -> "LedgerStore":
        """Context manager entry."""
        self.connect()
        return self

    def __exit__(
        self,
        exc_type: type | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Context manager exit."""
        self.close()

    def _ensure_connected(self) -> sqlite3.Connection:
        if self._conn is None:
            raise LedgerConnectionError("Database not connected. Call connect() first.")
        return self._conn

    @contextmanager
    def _transaction(self, operation: str) -> Generator[sqlite3.Connection]:
        """Run statements atomically under the connection lock.

        Args:
            operation: Name of the operation for logging.

        Yields:
            The open connection.

        Raises:
            LedgerError: If any statement fails; the transaction is rolled back.
        """
        with self._lock:
            conn = self._ensure_connected()
            tx_id = str(uuid.uuid4())[:8]
            start_ns = time.perf_counter_ns()
            try:
                yield conn
                conn.commit()
            except sqlite3.Error as e:
                conn.rollback()
                self._log.error(
                    "transaction_failed",
                    tx_id=tx_id,
                    op=operation,
                    error=str(e),
                )
                msg = f"{operation} failed: {e}"
                raise LedgerError(msg) from e

            self._log.debug(
                "transaction_complete",
                tx_id=tx_id,
                op=operation,
                duration_ms=round((time.perf_counter_ns() - start_ns) / 1_000_000, 2),
            )

    def upsert(self, item: Item) -> None:
        """Insert or merge an item.

        Title and URL are overwritten, the score keeps its running maximum
        and first-seen time is preserved. On first insert, first-seen is the
        item's creation time when known.

        Args:
            item: Freshly fetched item.

        Raises:
            LedgerError: If the write fails.
        """
        now = int(self._clock())
        first_seen = item.time if item.time > 0 else now

        with self._transaction("upsert") as conn:
            conn.execute(
                """
                INSERT INTO stories (
                    id, title, url, first_seen_at, last_seen_at, max_score
                ) VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    title = excluded.title,
                    url = excluded.url,
                    last_seen_at = excluded.last_seen_at,
                    max_score = MAX(stories.max_score, excluded.max_score)
                """,
                (item.id, item.title, item.url, first_seen, now, item.score),
            )

    def get(self, item_id: int) -> LedgerRecord | None:
        """Get the record for an item.

        Args:
            item_id: Item id.

        Returns:
            The record, or None if never upserted.
        """
        with self._lock:
            conn = self._ensure_connected()
            row = conn.execute(
                "SELECT * FROM stories WHERE id = ?", (item_id,)
            ).fetchone()

        if row is None:
            return None

        return LedgerRecord(
            id=row["id"],
            title=row["title"],
            url=row["url"] or "",
            first_seen_at=row["first_seen_at"],
            last_seen_at=row["last_seen_at"],
            max_score=row["max_score"],
            notified_at=row["notified_at"],
        )

    def is_eligible(self, item_id: int) -> bool:
        """Decide whether an item should notify now.

        Eligible iff not yet notified, at least ``min_age_seconds`` since
        first seen, and a running-max score of at least ``min_score``.
        Lookup failures and unknown ids are never eligible.

        Args:
            item_id: Item id.

        Returns:
            True if a notification should be dispatched.
        """
        try:
            record = self.get(item_id)
        except (LedgerError, sqlite3.Error) as e:
            self._log.warning("eligibility_check_failed", story_id=item_id, error=str(e))
            return False

        if record is None or record.is_notified:
            return False

        age = int(self._clock()) - record.first_seen_at
        if age < self._min_age_seconds:
            return False

        if record.max_score < self._min_score:
            return False

        self._log.info(
            "notification_eligible",
            story_id=item_id,
            age_seconds=age,
            max_score=record.max_score,
        )
        return True

    def mark_notified(self, item_id: int) -> bool:
        """Set the notified marker. Never overwrites an existing marker.

        Args:
            item_id: Item id.

        Returns:
            True if the marker was newly set.

        Raises:
            LedgerError: If the write fails.
        """
        with self._transaction("mark_notified") as conn:
            cursor = conn.execute(
                """
                UPDATE stories
                SET notified_at = ?
                WHERE id = ? AND notified_at IS NULL
                """,
                (int(self._clock()), item_id),
            )
            updated = cursor.rowcount > 0

        if updated:
            self._log.info("story_marked_notified", story_id=item_id)
        return updated

    def stats(self) -> LedgerStats:
        """Get summary counts.

        Returns:
            Schema version and row counts.
        """
        with self._lock:
            conn = self._ensure_connected()
            version = MigrationManager(conn).get_current_version()
            row = conn.execute(
                """
                SELECT COUNT(*) AS total,
                       COUNT(notified_at) AS notified
                FROM stories
                """
            ).fetchone()

        return LedgerStats(
            schema_version=version,
            total_items=row["total"],
            notified_items=row["notified"],
        )
