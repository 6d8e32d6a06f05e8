"""Application wiring."""

from hn30.app.container import Container, build_container


__all__ = ["Container", "build_container"]
