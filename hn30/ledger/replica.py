"""Secondary replica of the current top items (Turso/libSQL over HTTP)."""

import time
from collections.abc import Sequence
from urllib.parse import urlparse

import httpx
import structlog

from hn30.fetch import redact_url_credentials
from hn30.ledger.errors import ReplicaError
from hn30.source import Item


logger = structlog.get_logger()

REPLICA_TIMEOUT_SECONDS = 10.0

_CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS top_stories (
    hn_id INTEGER PRIMARY KEY,
    title TEXT NOT NULL,
    domain TEXT,
    added_at INTEGER NOT NULL
)
"""

_UPSERT_SQL = """
INSERT INTO top_stories (hn_id, title, domain, added_at)
VALUES (?, ?, ?, ?)
ON CONFLICT(hn_id) DO UPDATE SET
    title = excluded.title,
    domain = excluded.domain
"""


def extract_domain(url: str) -> str:
    """Host part of a URL, empty if absent or unparseable."""
    if not url:
        return ""
    try:
        return urlparse(url).netloc
    except ValueError:
        return ""


def to_http_url(database_url: str) -> str:
    """Map a ``libsql://`` database URL onto its HTTPS endpoint.

    Args:
        database_url: URL as configured.

    Returns:
        Base URL for the HTTP API.
    """
    if database_url.startswith("libsql://"):
        return "https://" + database_url.removeprefix("libsql://")
    return database_url.rstrip("/")


def _arg(value: int | str) -> dict[str, str]:
    if isinstance(value, int):
        return {"type": "integer", "value": str(value)}
    return {"type": "text", "value": value}


def _stmt(sql: str, args: Sequence[int | str] = ()) -> dict[str, object]:
    return {"sql": sql.strip(), "args": [_arg(a) for a in args]}


class TursoReplica:
    """Mirrors the ranked items into a remote ``top_stories`` table.

    One sync is one transactional batch: rows no longer ranked are deleted,
    ranked rows are inserted or have title/domain updated, and ``added_at``
    is kept for rows that stay. Every step is conditioned on the previous
    one succeeding and the batch rolls back if the commit does not run.
    """

    def __init__(
        self,
        database_url: str,
        auth_token: str,
        transport: httpx.BaseTransport | None = None,
        timeout: float = REPLICA_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize the replica client.

        Args:
            database_url: ``libsql://`` or ``https://`` database URL.
            auth_token: Database auth token.
            transport: Optional httpx transport for tests.
            timeout: Request timeout in seconds.
        """
        self._base_url = to_http_url(database_url)
        self._auth_token = auth_token
        self._transport = transport
        self._timeout = timeout
        self._log = logger.bind(
            component="replica", db_url=redact_url_credentials(self._base_url)
        )

    def build_batch(
        self, items: Sequence[Item], now: int
    ) -> list[dict[str, object]]:
        """Build the conditional batch steps for a sync.

        Args:
            items: Items to mirror, in ranking order.
            now: Unix time used as ``added_at`` for new rows.

        Returns:
            Batch steps in execution order.
        """
        statements: list[dict[str, object]] = [
            _stmt(_CREATE_TABLE_SQL),
            _stmt("BEGIN"),
        ]

        ids = [item.id for item in items]
        if ids:
            placeholders = ", ".join("?" for _ in ids)
            statements.append(
                _stmt(f"DELETE FROM top_stories WHERE hn_id NOT IN ({placeholders})", ids)
            )
        else:
            statements.append(_stmt("DELETE FROM top_stories"))

        statements.extend(
            _stmt(_UPSERT_SQL, (item.id, item.title, extract_domain(item.url), now))
            for item in items
        )
        statements.append(_stmt("COMMIT"))

        steps: list[dict[str, object]] = []
        for index, stmt in enumerate(statements):
            step: dict[str, object] = {"stmt": stmt}
            if index > 0:
                step["condition"] = {"type": "ok", "step": index - 1}
            steps.append(step)

        commit_step = len(statements) - 1
        steps.append(
            {
                "stmt": _stmt("ROLLBACK"),
                "condition": {
                    "type": "not",
                    "cond": {"type": "ok", "step": commit_step},
                },
            }
        )
        return steps

    def sync(self, items: Sequence[Item]) -> None:
        """Mirror the given items.

        Args:
            items: Current ranked items.

        Raises:
            ReplicaError: If the request fails or any step errors.
        """
        start_ns = time.perf_counter_ns()
        body = {
            "requests": [
                {"type": "batch", "batch": {"steps": self.build_batch(items, int(time.time()))}},
                {"type": "close"},
            ]
        }

        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                response = client.post(
                    f"{self._base_url}/v2/pipeline",
                    headers={"Authorization": f"Bearer {self._auth_token}"},
                    json=body,
                )
        except httpx.HTTPError as e:
            msg = f"Replica request failed: {e}"
            raise ReplicaError(msg) from e

        if response.status_code != httpx.codes.OK:
            msg = f"Replica returned {response.status_code}"
            raise ReplicaError(msg, status_code=response.status_code)

        try:
            payload = response.json()
        except ValueError as e:
            msg = "Replica returned malformed JSON"
            raise ReplicaError(msg) from e

        self._check_results(payload)

        self._log.info(
            "replica_sync_completed",
            synced_count=len(items),
            duration_ms=round((time.perf_counter_ns() - start_ns) / 1_000_000, 2),
        )

    @staticmethod
    def _check_results(payload: dict[str, object]) -> None:
        results = payload.get("results")
        if not isinstance(results, list) or not results:
            msg = "Replica response has no results"
            raise ReplicaError(msg)

        batch_result = results[0]
        if batch_result.get("type") == "error":
            error = batch_result.get("error") or {}
            raise ReplicaError(f"Replica batch failed: {error.get('message', 'unknown')}")

        result = batch_result.get("response", {}).get("result", {})
        for index, error in enumerate(result.get("step_errors") or []):
            if error is not None:
                msg = f"Replica step {index} failed: {error.get('message', 'unknown')}"
                raise ReplicaError(msg)
