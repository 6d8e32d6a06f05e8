"""HTTP read API."""

from hn30.api.app import create_app


__all__ = ["create_app"]
