"""Command-line interface."""

from hn30.cli.main import cli


__all__ = ["cli"]
