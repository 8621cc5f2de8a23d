"""FastAPI server for websearch-gateway.

Provides the JSON endpoints the desktop chat frontend calls before handing
search results to the local model.

Endpoints:
    POST /api/search/query - Web search (rate limited, cached)
    POST /api/search/clear-cache - Drop cached results and rate-limit records
    GET /api/search/status - Provider identity and cache/rate-limit sizes
    GET /health - Health check
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from websearch_gateway import __version__
from websearch_gateway.config import settings
from websearch_gateway.gateway.search_gateway import (
    InvalidMaxResultsError,
    MissingQueryError,
    RateLimitExceededError,
    SearchError,
    SearchGateway,
)
from websearch_gateway.types.api import (
    ClearCacheResponse,
    ErrorResponse,
    HealthResponse,
    SearchRequest,
    SearchResponse,
    StatusResponse,
)
from websearch_gateway.utils.logging import setup_logger

logger = setup_logger(__name__)

_ERROR_STATUS: dict[type[SearchError], int] = {
    MissingQueryError: status.HTTP_400_BAD_REQUEST,
    InvalidMaxResultsError: status.HTTP_400_BAD_REQUEST,
    RateLimitExceededError: status.HTTP_429_TOO_MANY_REQUESTS,
}


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
    )


def _get_gateway(request: Request) -> SearchGateway:
    return request.app.state.gateway


def create_app(gateway: SearchGateway | None = None) -> FastAPI:
    """Build the FastAPI application around one SearchGateway instance.

    Args:
        gateway: Gateway to serve. If None, one is built from global settings
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Search API ready", extra={"provider": app.state.gateway.get_status()["provider"]})
        yield
        logger.info("Search API shutting down")

    app = FastAPI(
        title="Web Search Gateway API",
        description="Privacy-first DuckDuckGo HTML search for the local LLM desktop app.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.gateway = gateway or SearchGateway()

    if settings.enable_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$",
            allow_credentials=False,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    # =========================================================================
    # Error handlers
    # =========================================================================

    @app.exception_handler(SearchError)
    async def search_error_handler(request: Request, exc: SearchError) -> JSONResponse:
        status_code = _ERROR_STATUS.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
        return _error_response(status_code, str(exc))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = exc.errors()
        detail = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
        return _error_response(status.HTTP_400_BAD_REQUEST, f"Invalid request: {detail}")

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unhandled error processing {request.url.path}: {exc}")
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, f"Search failed: {exc}")

    # =========================================================================
    # Endpoints
    # =========================================================================

    @app.post("/api/search/query", response_model=SearchResponse)
    async def search(body: SearchRequest, request: Request) -> SearchResponse:
        """Run a web search for the requesting client."""
        client_id = request.client.host if request.client else "unknown"
        outcome = await _get_gateway(request).search(
            body.query,
            max_results=body.max_results,
            client_id=client_id,
        )
        return SearchResponse(
            query=outcome.query,
            results=outcome.results,
            cached=outcome.cached,
            result_count=outcome.result_count,
        )

    @app.post("/api/search/clear-cache", response_model=ClearCacheResponse)
    async def clear_cache(request: Request) -> ClearCacheResponse:
        """Drop every cached result and rate-limit record."""
        _get_gateway(request).clear_cache()
        return ClearCacheResponse()

    @app.get("/api/search/status", response_model=StatusResponse)
    async def search_status(request: Request) -> StatusResponse:
        """Report provider identity and current cache/rate-limit sizes."""
        return StatusResponse(**_get_gateway(request).get_status())

    @app.get("/health", response_model=HealthResponse)
    async def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(status="ok", version=__version__)

    return app


app = create_app()
