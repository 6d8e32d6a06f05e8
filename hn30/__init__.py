"""Hacker News top-30 aggregator with enrichment, notifications and a read API."""

__version__ = "2.0.0"
