"""Shared fixtures."""

from collections.abc import Iterator

import pytest

from hn30.fetch import FetchMetrics
from hn30.refresh import RefreshMetrics


@pytest.fixture(autouse=True)
def _reset_metrics() -> Iterator[None]:
    """Give every test fresh metrics singletons."""
    FetchMetrics.reset()
    RefreshMetrics.reset()
    yield
    FetchMetrics.reset()
    RefreshMetrics.reset()
