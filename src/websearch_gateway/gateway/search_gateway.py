"""Search gateway: validation, rate limiting and caching around the scraper."""

from typing import Any

import httpx

from websearch_gateway.config import Settings, settings
from websearch_gateway.tools._http_utils import SearchTimeoutError, UpstreamError
from websearch_gateway.tools.duckduckgo_html import (
    PROVIDER_METHOD,
    PROVIDER_NAME,
    duckduckgo_html_search,
)
from websearch_gateway.tools.html_parsing import SearchParseError
from websearch_gateway.types.search import SearchOutcome
from websearch_gateway.utils.cache import SearchResultCache
from websearch_gateway.utils.logging import log_with_context, setup_logger
from websearch_gateway.utils.rate_limit import SlidingWindowRateLimiter

logger = setup_logger(__name__)


class SearchError(Exception):
    """Base exception for every condition reported back to the caller."""


class MissingQueryError(SearchError):
    """The query was empty or whitespace only."""

    def __init__(self, message: str = "Query is required"):
        super().__init__(message)


class RateLimitExceededError(SearchError):
    """The client used up its request budget for the current window."""

    def __init__(self, message: str = "Rate limit exceeded. Try again later."):
        super().__init__(message)


class InvalidMaxResultsError(SearchError):
    """max_results was given but is below 1."""

    def __init__(self, message: str = "maxResults must be at least 1"):
        super().__init__(message)


class SearchFailedError(SearchError):
    """The upstream fetch or the parse failed.

    ``reason`` is one of ``"timeout"``, ``"network"``, ``"upstream"`` or
    ``"parse"``; the original exception is chained as ``__cause__``.
    """

    def __init__(self, message: str, reason: str):
        super().__init__(f"Search failed: {message}")
        self.reason = reason


class SearchGateway:
    """Single entry point for web searches.

    Owns the result cache and the rate limiter; nothing else touches them.
    Concurrent identical queries are not coalesced: each one that misses the
    cache goes upstream and the last to finish owns the cache entry.
    """

    def __init__(
        self,
        config: Settings | None = None,
        cache: SearchResultCache | None = None,
        rate_limiter: SlidingWindowRateLimiter | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the gateway.

        Args:
            config: Settings to use. If None, uses the global settings
            cache: Result cache. If None, one is built from config
            rate_limiter: Rate limiter. If None, one is built from config
            transport: Optional httpx transport for upstream requests
        """
        self.config = config or settings
        self.cache = cache or SearchResultCache(
            max_size=self.config.cache_max_size,
            ttl_seconds=self.config.cache_ttl_seconds,
        )
        self.rate_limiter = rate_limiter or SlidingWindowRateLimiter(
            max_requests=self.config.rate_limit_max_requests,
            window_seconds=self.config.rate_limit_window_seconds,
        )
        self.transport = transport

        logger.info(
            "SearchGateway initialized",
            extra={
                "provider": PROVIDER_NAME,
                "cache_max_size": self.cache.max_size,
                "rate_limit": f"{self.rate_limiter.max_requests}/{self.rate_limiter.window_seconds}s",
            },
        )

    async def search(
        self,
        query: str,
        max_results: int | None = None,
        client_id: str = "unknown",
    ) -> SearchOutcome:
        """Search the web for ``query``.

        Args:
            query: Search terms; must not be blank
            max_results: Maximum number of results. If None, uses config.default_max_results
            client_id: Identity used for rate limiting (the remote address)

        Returns:
            SearchOutcome with ``cached`` set when served from the cache

        Raises:
            MissingQueryError: If the query is blank
            InvalidMaxResultsError: If max_results is below 1
            RateLimitExceededError: If the client exceeded its budget
            SearchFailedError: If fetching or parsing failed
        """
        if not query or not query.strip():
            raise MissingQueryError()

        query = query.strip()
        if max_results is None:
            max_results = self.config.default_max_results
        elif max_results < 1:
            raise InvalidMaxResultsError()

        if not self.rate_limiter.allow(client_id):
            raise RateLimitExceededError()

        cache_key = self.cache.make_key(query, max_results)
        cached_results = self.cache.get(cache_key)
        if cached_results is not None:
            logger.info(
                f"Search cache hit for: {query}",
                extra={"num_results": len(cached_results)},
            )
            return SearchOutcome(query=query, results=cached_results, cached=True)

        logger.info(f"Searching web for: {query}", extra={"client_id": client_id})
        try:
            results = await duckduckgo_html_search(
                query,
                max_results=max_results,
                config=self.config,
                transport=self.transport,
            )
        except SearchTimeoutError as e:
            raise self._failed(query, e, "timeout") from e
        except UpstreamError as e:
            reason = "network" if isinstance(e.__cause__, httpx.TransportError) else "upstream"
            raise self._failed(query, e, reason) from e
        except SearchParseError as e:
            raise self._failed(query, e, "parse") from e

        if results:
            self.cache.set(cache_key, results)

        return SearchOutcome(query=query, results=results, cached=False)

    def clear_cache(self) -> None:
        """Empty the result cache and forget every rate-limit record."""
        removed = self.cache.clear()
        self.rate_limiter.clear()
        logger.info("Search cache cleared", extra={"entries_removed": removed})

    def get_status(self) -> dict[str, Any]:
        """Provider identity and current state sizes. No side effects."""
        return {
            "provider": PROVIDER_NAME,
            "method": PROVIDER_METHOD,
            "cache_size": len(self.cache),
            "rate_limit_entries": len(self.rate_limiter),
        }

    @staticmethod
    def _failed(query: str, error: Exception, reason: str) -> SearchFailedError:
        log_with_context(logger, "error", f"Search error: {error}", query=query, reason=reason)
        return SearchFailedError(str(error), reason=reason)
