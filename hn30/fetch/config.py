"""Configuration models for the HTTP fetch layer."""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from hn30.fetch.constants import (
    ARTICLE_TIMEOUT_SECONDS,
    DEFAULT_MAX_RESPONSE_SIZE_BYTES,
    ENRICHMENT_TIMEOUT_SECONDS,
    PROXY_TIMEOUT_SECONDS,
    SOURCE_TIMEOUT_SECONDS,
    USER_AGENT,
)


class FetchConfig(BaseModel):
    """Configuration for the HTTP fetch layer.

    Central configuration for all outbound HTTP operations. Timeouts are
    split by purpose so a slow enrichment origin cannot stall the ranking
    fetch, and the proxy relay gets a longer but still bounded timeout.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    user_agent: Annotated[str, Field(min_length=1, max_length=500)] = USER_AGENT
    source_timeout_seconds: Annotated[float, Field(gt=0, le=300.0)] = (
        SOURCE_TIMEOUT_SECONDS
    )
    enrichment_timeout_seconds: Annotated[float, Field(gt=0, le=300.0)] = (
        ENRICHMENT_TIMEOUT_SECONDS
    )
    article_timeout_seconds: Annotated[float, Field(gt=0, le=300.0)] = (
        ARTICLE_TIMEOUT_SECONDS
    )
    proxy_timeout_seconds: Annotated[float, Field(gt=0, le=300.0)] = (
        PROXY_TIMEOUT_SECONDS
    )
    max_response_size_bytes: Annotated[int, Field(ge=1024, le=100 * 1024 * 1024)] = (
        DEFAULT_MAX_RESPONSE_SIZE_BYTES
    )
