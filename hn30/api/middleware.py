"""Request logging middleware and error handlers."""

import time

import structlog
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response


logger = structlog.get_logger()


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log method, path, status and duration of every request."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start_ns = time.perf_counter_ns()
        response = await call_next(request)
        duration_ms = round((time.perf_counter_ns() - start_ns) / 1_000_000, 2)

        log = logger.bind(
            component="http",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=duration_ms,
            client_ip=request.client.host if request.client else None,
        )
        if response.status_code >= 500:
            log.error("http_request")
        elif response.status_code >= 400:
            log.warning("http_request")
        else:
            log.info("http_request")
        return response


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all returning a generic 500 with no internal detail."""
    logger.error(
        "unhandled_exception",
        component="http",
        path=request.url.path,
        error=str(exc),
        error_type=type(exc).__name__,
    )
    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})
