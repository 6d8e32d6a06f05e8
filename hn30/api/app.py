"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import hn30
from hn30.api.middleware import RequestLoggingMiddleware, unhandled_exception_handler
from hn30.api.routes import router
from hn30.app import Container


logger = structlog.get_logger()


def create_app(container: Container, start_background: bool = True) -> FastAPI:
    """Build the read API around a wired container.

    Args:
        container: Wired service components.
        start_background: Start the refresh scheduler on startup.

    Returns:
        Configured FastAPI application.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
        log = logger.bind(component="app")
        if start_background:
            container.scheduler.start()
        log.info("application_started", version=hn30.__version__)
        yield
        # Runs after the server has stopped accepting and draining requests.
        container.close()
        log.info("application_stopped")

    app = FastAPI(title="hn30", version=hn30.__version__, lifespan=lifespan)
    app.state.container = container

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    app.add_exception_handler(Exception, unhandled_exception_handler)
    app.include_router(router, prefix=container.settings.api_prefix.rstrip("/"))

    return app
