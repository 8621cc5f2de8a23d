"""API request/response schemas for FastAPI endpoints."""

from pydantic import BaseModel, ConfigDict, Field

from websearch_gateway.types.search import SearchResult


class SearchRequest(BaseModel):
    """Request schema for POST /api/search/query.

    An empty query is accepted here and rejected by the gateway, so the
    client gets the 400 envelope instead of a schema error.
    """

    model_config = ConfigDict(populate_by_name=True)

    query: str = Field(default="", description="Search terms")
    max_results: int | None = Field(
        default=None,
        ge=1,
        alias="maxResults",
        description="Maximum number of results (server default when omitted)",
    )


class SearchResponse(BaseModel):
    """Response schema for a successful search."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    query: str
    results: list[SearchResult] = Field(default_factory=list)
    cached: bool = False
    result_count: int = Field(default=0, alias="resultCount")


class ErrorResponse(BaseModel):
    """Error envelope shared by every endpoint."""

    success: bool = False
    error: str


class ClearCacheResponse(BaseModel):
    """Response schema for POST /api/search/clear-cache."""

    success: bool = True
    message: str = "Cache cleared successfully"


class StatusResponse(BaseModel):
    """Response schema for GET /api/search/status."""

    success: bool = True
    provider: str
    method: str
    cache_size: int = Field(..., ge=0)
    rate_limit_entries: int = Field(..., ge=0)
    privacy_first: bool = True


class HealthResponse(BaseModel):
    """Response schema for GET /health endpoint."""

    status: str = Field(default="ok")
    version: str = Field(default="1.0.0")
