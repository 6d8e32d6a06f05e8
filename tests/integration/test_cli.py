"""Integration tests for the command line interface."""

import json
import logging
from collections.abc import Iterator
from pathlib import Path

import pytest
import structlog
from click.testing import CliRunner

import hn30
from hn30.cli import main as cli_main
from hn30.ledger import CURRENT_VERSION, LedgerStore
from tests.helpers.fakes import make_item


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Silence structlog and leave its global configuration alone during CLI runs."""
    monkeypatch.setattr(cli_main, "configure_logging", lambda **_: None)
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(logging.CRITICAL),
        cache_logger_on_first_use=False,
    )
    yield
    structlog.reset_defaults()


@pytest.fixture
def db_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    path = tmp_path / "data" / "hn30.db"
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("SQLITE_PATH", str(path))
    return path


class TestCli:
    """Tests for the hn30 command group."""

    def test_version(self) -> None:
        """Test that --version prints the package version."""
        result = CliRunner().invoke(cli_main.cli, ["--version"])

        assert result.exit_code == 0
        assert hn30.__version__ in result.output

    def test_ledger_stats_json(self, db_path: Path) -> None:
        """Test that ledger-stats reports counts as JSON."""
        with LedgerStore(db_path) as store:
            store.upsert(make_item(1))
            store.upsert(make_item(2))
            store.mark_notified(2)

        result = CliRunner().invoke(cli_main.cli, ["ledger-stats", "--json"])

        assert result.exit_code == 0
        assert json.loads(result.output) == {
            "schema_version": CURRENT_VERSION,
            "total_items": 2,
            "notified_items": 1,
        }

    def test_ledger_stats_text(self, db_path: Path) -> None:
        """Test the human-readable summary on a fresh ledger."""
        result = CliRunner().invoke(cli_main.cli, ["ledger-stats"])

        assert result.exit_code == 0
        assert "Items: 0" in result.output
        assert db_path.exists()

    def test_ledger_stats_unopenable(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test that an unusable ledger path exits with status 1."""
        (tmp_path / "blocker").write_text("x", encoding="utf-8")
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("SQLITE_PATH", str(tmp_path / "blocker" / "hn30.db"))

        result = CliRunner().invoke(cli_main.cli, ["ledger-stats"])

        assert result.exit_code == 1
