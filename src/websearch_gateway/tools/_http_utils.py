"""Shared HTTP utilities for fetching upstream HTML pages."""

import asyncio
from urllib.parse import urljoin

import httpx

from websearch_gateway.config import settings
from websearch_gateway.utils.logging import setup_logger

logger = setup_logger(__name__)


class UpstreamError(Exception):
    """Base exception for failures talking to the upstream search endpoint.

    Covers connection and DNS failures, HTTP error statuses and redirect
    problems. Timeouts use the SearchTimeoutError subclass.
    """


class SearchTimeoutError(UpstreamError):
    """The upstream fetch did not finish within the configured time limit."""


class TooManyRedirectsError(UpstreamError):
    """The upstream kept redirecting after the allowed number of hops."""


async def fetch_html(
    url: str,
    headers: dict[str, str],
    timeout: float | None = None,
    max_redirects: int | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> str:
    """GET ``url`` and return the full response body as text.

    Redirects are followed by hand so the same headers go out on every hop and
    the hop count stays bounded. The time limit covers the whole exchange,
    redirect hops included.

    Args:
        url: Absolute URL to fetch
        headers: Request headers, reused on redirect hops
        timeout: Time limit in seconds. If None, uses settings.search_timeout
        max_redirects: Redirect hops allowed. If None, uses settings.search_max_redirects
        transport: Optional httpx transport (tests pass an httpx.MockTransport)

    Returns:
        Decoded response body

    Raises:
        SearchTimeoutError: If the fetch exceeds the time limit
        TooManyRedirectsError: If the upstream redirects more than max_redirects times
        UpstreamError: For connection failures, HTTP error statuses and malformed redirect targets
    """
    timeout = timeout if timeout is not None else settings.search_timeout
    max_redirects = max_redirects if max_redirects is not None else settings.search_max_redirects

    try:
        return await asyncio.wait_for(
            _fetch_following_redirects(url, headers, timeout, max_redirects, transport),
            timeout=timeout,
        )
    except (TimeoutError, asyncio.TimeoutError, httpx.TimeoutException) as e:
        logger.error(f"Request timeout for URL: {url}", extra={"timeout": timeout})
        raise SearchTimeoutError("Search request timeout") from e
    except httpx.HTTPError as e:
        logger.error(
            "HTTP error during upstream request",
            extra={"url": url, "error": str(e)},
        )
        raise UpstreamError(str(e) or e.__class__.__name__) from e
    except (httpx.InvalidURL, ValueError) as e:
        # Malformed redirect target; httpx.InvalidURL is not an HTTPError
        logger.error(
            "Invalid upstream URL",
            extra={"url": url, "error": str(e)},
        )
        raise UpstreamError(f"Invalid upstream URL: {e}") from e


async def _fetch_following_redirects(
    url: str,
    headers: dict[str, str],
    timeout: float,
    max_redirects: int,
    transport: httpx.AsyncBaseTransport | None,
) -> str:
    async with httpx.AsyncClient(
        transport=transport,
        timeout=timeout,
        follow_redirects=False,
    ) as client:
        hops = 0
        while True:
            response = await client.get(url, headers=headers)

            location = response.headers.get("location")
            if 300 <= response.status_code < 400 and location:
                if hops >= max_redirects:
                    raise TooManyRedirectsError(
                        f"Upstream redirected more than {max_redirects} time(s)"
                    )
                hops += 1
                url = urljoin(url, location)
                logger.debug("Following upstream redirect", extra={"location": url, "hop": hops})
                continue

            if response.status_code >= 400:
                raise UpstreamError(f"Upstream returned HTTP {response.status_code}")

            return response.text
