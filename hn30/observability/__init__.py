"""Observability module for structured logging."""

from hn30.observability.logging import (
    bind_cycle_context,
    clear_cycle_context,
    configure_logging,
    get_logger,
)


__all__ = [
    "bind_cycle_context",
    "clear_cycle_context",
    "configure_logging",
    "get_logger",
]
