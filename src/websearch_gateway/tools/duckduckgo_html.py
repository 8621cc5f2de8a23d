"""DuckDuckGo HTML search: fetch the results page and scrape organic hits."""

from urllib.parse import quote

import httpx

from websearch_gateway.config import Settings, settings
from websearch_gateway.tools._http_utils import fetch_html
from websearch_gateway.tools.html_parsing import extract_results
from websearch_gateway.types.search import SearchResult
from websearch_gateway.utils.logging import setup_logger

logger = setup_logger(__name__)

PROVIDER_NAME = "DuckDuckGo HTML"
PROVIDER_METHOD = "HTML scraping of the no-JavaScript results page (no API key, no tracking)"


def build_search_url(query: str, endpoint: str | None = None) -> str:
    """Percent-encode ``query`` into the endpoint template.

    >>> build_search_url("tom & jerry", "https://html.duckduckgo.com/html/?q={query}")
    'https://html.duckduckgo.com/html/?q=tom%20%26%20jerry'
    """
    endpoint = endpoint or settings.search_endpoint
    return endpoint.replace("{query}", quote(query, safe=""))


def build_headers(user_agent: str | None = None) -> dict[str, str]:
    """Browser-like headers; ``identity`` keeps the body uncompressed."""
    return {
        "User-Agent": user_agent or settings.search_user_agent,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.9",
        "Accept-Encoding": "identity",
    }


async def duckduckgo_html_search(
    query: str,
    max_results: int = 5,
    config: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[SearchResult]:
    """Fetch the DuckDuckGo HTML results page for ``query`` and parse it.

    Args:
        query: Search query string (already validated and trimmed)
        max_results: Stop collecting once this many results were parsed
        config: Settings to use. If None, uses the global settings
        transport: Optional httpx transport for the upstream request

    Returns:
        Parsed results, possibly empty

    Raises:
        UpstreamError: Network failure, HTTP error or redirect overflow
        SearchTimeoutError: The fetch exceeded config.search_timeout
        SearchParseError: The parser failed on the returned markup
    """
    config = config or settings
    url = build_search_url(query, config.search_endpoint)

    logger.info(f"Fetching DuckDuckGo HTML results for: {query}")
    page = await fetch_html(
        url,
        headers=build_headers(config.search_user_agent),
        timeout=config.search_timeout,
        max_redirects=config.search_max_redirects,
        transport=transport,
    )

    results = extract_results(page, max_results)
    logger.info(
        f"DuckDuckGo search completed: {len(results)} results",
        extra={"query": query, "page_bytes": len(page)},
    )
    return results
