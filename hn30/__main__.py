"""Entry point for ``python -m hn30``."""

from hn30.cli import cli


cli()
