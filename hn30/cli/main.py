"""CLI commands for the hn30 service."""

import json
import logging
import sys

import click
import structlog
import uvicorn
from pydantic import ValidationError

import hn30
from hn30.api import create_app
from hn30.app import Container, build_container
from hn30.ledger import LedgerError, LedgerStore
from hn30.observability import configure_logging
from hn30.settings import AppSettings


logger = structlog.get_logger()


def _setup(json_logs: bool, verbose: bool, quiet: bool = False) -> AppSettings:
    """Configure logging and load settings, exiting on invalid settings."""
    if quiet:
        configure_logging(level=logging.WARNING, output=sys.stderr, json_format=False)
    else:
        configure_logging(
            level=logging.DEBUG if verbose else logging.INFO, json_format=json_logs
        )
    try:
        return AppSettings()
    except ValidationError as e:
        click.echo(f"Invalid configuration: {e}", err=True)
        sys.exit(1)


def _connect_ledger(container: Container) -> None:
    """Open the ledger or abort the process."""
    try:
        container.ledger.connect()
    except LedgerError as e:
        logger.error("startup_failed", component="cli", stage="ledger", error=str(e))
        click.echo(f"Cannot open ledger: {e}", err=True)
        sys.exit(1)


json_logs_option = click.option(
    "--json-logs/--no-json-logs",
    default=True,
    help="Use JSON format for logs (default: true).",
)
verbose_option = click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose logging.",
)


@click.group()
@click.version_option(version=hn30.__version__)
def cli() -> None:
    """hn30: top stories cache, read API and notifier."""


@cli.command()
@click.option("--host", default=None, help="Bind address (default: HN30_HOST).")
@click.option("--port", type=int, default=None, help="Bind port (default: HN30_PORT).")
@json_logs_option
@verbose_option
def serve(host: str | None, port: int | None, json_logs: bool, verbose: bool) -> None:
    """Run the read API with the background refresher.

    The ledger is opened before the listener starts; failure exits with
    status 1. On SIGINT/SIGTERM in-flight requests get a grace period,
    then the refresher stops and the ledger closes.
    """
    settings = _setup(json_logs, verbose)
    container = build_container(settings)
    _connect_ledger(container)

    config = uvicorn.Config(
        create_app(container),
        host=host or settings.host,
        port=port or settings.port,
        timeout_graceful_shutdown=settings.shutdown_grace_seconds,
        log_config=None,
        access_log=False,
    )
    logger.info(
        "server_starting",
        component="cli",
        host=config.host,
        port=config.port,
        api_prefix=settings.api_prefix,
    )
    uvicorn.Server(config).run()


@cli.command()
@json_logs_option
@verbose_option
def refresh(json_logs: bool, verbose: bool) -> None:
    """Run exactly one refresh cycle and print its result."""
    settings = _setup(json_logs, verbose)
    container = build_container(settings)
    _connect_ledger(container)

    try:
        result = container.engine.run_cycle()
    finally:
        container.dispatcher.close(wait=True)
        container.ledger.close()

    click.echo(result.model_dump_json(indent=2))
    if not result.success:
        sys.exit(1)


@cli.command("ledger-stats")
@click.option("--json", "as_json", is_flag=True, help="Print stats as JSON.")
def ledger_stats(as_json: bool) -> None:
    """Show ledger schema version and row counts."""
    settings = _setup(json_logs=False, verbose=False, quiet=True)

    try:
        with LedgerStore(settings.sqlite_path) as ledger:
            stats = ledger.stats()
    except LedgerError as e:
        click.echo(f"Cannot open ledger: {e}", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(stats.model_dump(), indent=2))
        return

    click.echo(f"Ledger: {settings.sqlite_path}")
    click.echo(f"  Schema version: {stats.schema_version}")
    click.echo(f"  Items: {stats.total_items}")
    click.echo(f"  Notified: {stats.notified_items}")


if __name__ == "__main__":
    cli()
