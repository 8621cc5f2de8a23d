"""Type definitions for websearch-gateway.

This module re-exports all types from submodules for convenient imports.
"""

from websearch_gateway.types.api import (
    ClearCacheResponse,
    ErrorResponse,
    HealthResponse,
    SearchRequest,
    SearchResponse,
    StatusResponse,
)
from websearch_gateway.types.search import (
    RESULT_SOURCE,
    RESULT_TYPE,
    SearchOutcome,
    SearchResult,
)

__all__ = [
    # Search
    "RESULT_SOURCE",
    "RESULT_TYPE",
    "SearchResult",
    "SearchOutcome",
    # API
    "SearchRequest",
    "SearchResponse",
    "ErrorResponse",
    "ClearCacheResponse",
    "StatusResponse",
    "HealthResponse",
]
