"""Read API routes."""

from typing import Annotated

import structlog
from fastapi import APIRouter, HTTPException, Query, status
from fastapi.responses import JSONResponse, StreamingResponse

from hn30.api.deps import ContainerDep, RateLimited
from hn30.fetch import FetchMetrics
from hn30.proxy import ProxyError
from hn30.refresh import RefreshMetrics
from hn30.summarize import StoryNotFoundError, SummarizationError


logger = structlog.get_logger()

router = APIRouter()


@router.get("/top")
def top_stories(container: ContainerDep) -> JSONResponse:
    """Current ranked items, enriched, in ranking order."""
    return JSONResponse([entry.to_api_dict() for entry in container.cache.get_all()])


@router.get("/summarize")
def summarize(
    container: ContainerDep,
    _identity: RateLimited,
    story_id: Annotated[str | None, Query(alias="id")] = None,
) -> JSONResponse:
    """Summary for a cached item, generated on first request."""
    if not story_id:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail="Missing story ID")
    try:
        item_id = int(story_id)
    except ValueError:
        raise HTTPException(
            status.HTTP_400_BAD_REQUEST, detail="Invalid story ID"
        ) from None

    try:
        result = container.summarizer.summarize(item_id)
    except StoryNotFoundError:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Story not found") from None
    except SummarizationError as e:
        logger.error(
            "summary_failed", component="summarize", story_id=item_id, error=str(e)
        )
        raise HTTPException(
            status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to generate summary"
        ) from None

    return JSONResponse(result.model_dump())


@router.get("/proxy")
def proxy(
    container: ContainerDep,
    url: Annotated[str | None, Query()] = None,
) -> StreamingResponse:
    """Relay a remote resource after SSRF validation."""
    if not url:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail="Missing URL")

    try:
        upstream = container.proxy.open(url)
    except ProxyError as e:
        if e.status_code == status.HTTP_400_BAD_REQUEST:
            detail = f"Invalid or forbidden URL: {e}"
        else:
            detail = str(e)
        raise HTTPException(e.status_code, detail=detail) from None

    return StreamingResponse(
        upstream.iter_bytes(),
        status_code=upstream.status_code,
        headers=upstream.headers,
    )


@router.get("/health")
def health(container: ContainerDep) -> dict[str, object]:
    """Liveness and staleness of the snapshot, plus process counters."""
    last_updated = container.cache.last_updated()
    return {
        "status": "ok",
        "last_updated": last_updated.isoformat() if last_updated else None,
        "items": len(container.cache.get_all()),
        "metrics": {
            "refresh": RefreshMetrics.get_instance().to_dict(),
            "fetch": FetchMetrics.get_instance().to_dict(),
        },
    }
