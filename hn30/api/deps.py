"""FastAPI dependencies."""

from typing import Annotated

import structlog
from fastapi import Depends, HTTPException, Request, status

from hn30.app import Container
from hn30.ratelimit import client_identity


logger = structlog.get_logger()


def get_container(request: Request) -> Container:
    """Container stored on the application state."""
    container: Container = request.app.state.container
    return container


ContainerDep = Annotated[Container, Depends(get_container)]


def enforce_rate_limit(request: Request, container: ContainerDep) -> str:
    """Reject the request with 429 when the client has no token left.

    Returns:
        The client identity.
    """
    peer = request.client.host if request.client else None
    identity = client_identity(request.headers, peer)
    logger.debug(
        "rate_limit_check", component="ratelimit", path=request.url.path, client_ip=identity
    )
    if not container.rate_limiter.allow(identity):
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too Many Requests",
        )
    return identity


RateLimited = Annotated[str, Depends(enforce_rate_limit)]
