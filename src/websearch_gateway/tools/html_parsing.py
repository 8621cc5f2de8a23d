"""Regex-based extraction of organic results from DuckDuckGo HTML markup.

Two strategies share the ``ResultExtractor`` interface:

- ``PrimaryBlockExtractor`` walks ``<div class="result ...">`` blocks and reads
  the title anchor, snippet and display URL inside each one.
- ``LinkHarvestExtractor`` is used when the primary strategy finds nothing. It
  collects every redirect-wrapped link and every snippet cell in the document
  and pairs them by position.

Markup drift on the upstream side is expected; a block that does not look like
a result is skipped rather than failing the whole page.
"""

import re
from collections.abc import Iterable
from typing import Protocol
from urllib.parse import unquote, urlparse

from pydantic import ValidationError

from websearch_gateway.types.search import SearchResult
from websearch_gateway.utils.logging import setup_logger

logger = setup_logger(__name__)

FALLBACK_SNIPPET = "No description available"

HTML_ENTITIES: dict[str, str] = {
    "&amp;": "&",
    "&lt;": "<",
    "&gt;": ">",
    "&quot;": '"',
    "&#39;": "'",
    "&apos;": "'",
    "&nbsp;": " ",
    "&#x27;": "'",
    "&#x2F;": "/",
    "&#x60;": "`",
    "&#x3D;": "=",
}

_ENTITY_RE = re.compile("|".join(re.escape(entity) for entity in HTML_ENTITIES))
_TAG_RE = re.compile(r"<[^>]+>")
_WHITESPACE_RE = re.compile(r"\s+")
_UDDG_RE = re.compile(r"[?&;]uddg=([^&\"'#]+)")

# A <div> whose class list holds the bare token "result". The block runs until
# the next such div or the end of the document.
_RESULT_DIV = r'<div\b[^>]*\bclass="(?:[^"]*\s)?result(?:\s[^"]*)?"[^>]*>'
_RESULT_BLOCK_RE = re.compile(
    rf"{_RESULT_DIV}(.*?)(?={_RESULT_DIV}|\Z)",
    re.IGNORECASE | re.DOTALL,
)
# Matched against tag markup only, so result text mentioning "sponsored" is kept
_AD_MARKER_RE = re.compile(r"result--ad|sponsored")

_ANCHOR_RE = re.compile(r"<a\b([^>]*)>(.*?)</a>", re.IGNORECASE | re.DOTALL)
_HREF_RE = re.compile(r'\bhref="([^"]*)"', re.IGNORECASE)
_CLASS_RE = re.compile(r'\bclass="([^"]*)"', re.IGNORECASE)
_DISPLAY_URL_RE = re.compile(
    r'<(a|span)\b[^>]*\bclass="[^"]*\bresult__url\b[^"]*"[^>]*>(.*?)</\1>',
    re.IGNORECASE | re.DOTALL,
)

_REDIRECT_LINK_RE = re.compile(
    r'<a\b[^>]*\bhref="[^"]*uddg=([^"&]+)[^"]*"[^>]*>(.*?)</a>',
    re.IGNORECASE | re.DOTALL,
)
_SNIPPET_CELL_RE = re.compile(
    r'<td\b[^>]*\bclass="[^"]*\bresult-snippet\b[^"]*"[^>]*>(.*?)</td>',
    re.IGNORECASE | re.DOTALL,
)


class SearchParseError(Exception):
    """Raised when the parsing step itself fails (not when it matches nothing)."""


class ResultExtractor(Protocol):
    """Anything that turns raw result-page markup into SearchResult models."""

    name: str

    def extract(self, html: str, max_results: int) -> list[SearchResult]: ...


def decode_html_entities(text: str) -> str:
    """Replace the entities in HTML_ENTITIES; anything else is left as written.

    Substitution is single-pass, so ``&amp;lt;`` becomes ``&lt;`` and not ``<``.
    """
    return _ENTITY_RE.sub(lambda match: HTML_ENTITIES[match.group(0)], text)


def clean_text(fragment: str) -> str:
    """Strip tags, collapse whitespace and decode entities."""
    without_tags = _TAG_RE.sub("", fragment)
    return _WHITESPACE_RE.sub(" ", decode_html_entities(without_tags)).strip()


def unwrap_redirect_url(href: str) -> str:
    """Return the destination hidden in a ``uddg=`` parameter, or ``href`` itself.

    >>> unwrap_redirect_url("/l/?uddg=https%3A%2F%2Fexample.com%2Fpage&rut=abc")
    'https://example.com/page'
    """
    match = _UDDG_RE.search(href)
    if match is None:
        return href
    return unquote(match.group(1))


def display_host(url: str) -> str:
    """Host part of ``url`` without a leading ``www.``; empty if it does not parse."""
    try:
        host = urlparse(url).hostname or ""
    except ValueError:
        return ""
    return host[4:] if host.startswith("www.") else host


def is_web_url(url: str) -> bool:
    """True for http(s) URLs with a host that ``urlparse`` accepts."""
    return url.startswith("http") and bool(display_host(url))


def _is_ad_block(block: str) -> bool:
    return any(_AD_MARKER_RE.search(tag) for tag in _TAG_RE.findall(block))


def _find_anchor(block: str, class_token: str) -> tuple[str, str] | None:
    """First ``<a>`` in ``block`` whose class list holds ``class_token``.

    Returns ``(href, inner_html)``. Attribute order does not matter.
    """
    for attrs, inner in _ANCHOR_RE.findall(block):
        class_match = _CLASS_RE.search(attrs)
        if class_match is None or class_token not in class_match.group(1).split():
            continue
        href_match = _HREF_RE.search(attrs)
        return (href_match.group(1) if href_match else "", inner)
    return None


def _build_result(title: str, url: str, snippet: str, display_url: str) -> SearchResult | None:
    try:
        return SearchResult(title=title, url=url, snippet=snippet, display_url=display_url)
    except ValidationError as e:
        logger.debug("Dropping incomplete result", extra={"url": url, "error": str(e)})
        return None


class PrimaryBlockExtractor:
    """Structured extraction from ``result`` blocks."""

    name = "primary"

    def extract(self, html: str, max_results: int) -> list[SearchResult]:
        results: list[SearchResult] = []

        for match in _RESULT_BLOCK_RE.finditer(html):
            if len(results) >= max_results:
                break

            result = self._parse_block(match.group(0))
            if result is not None:
                results.append(result)

        return results

    def _parse_block(self, block: str) -> SearchResult | None:
        if _is_ad_block(block):
            return None

        title_anchor = _find_anchor(block, "result__a")
        if title_anchor is None:
            return None

        raw_href, title_html = title_anchor
        url = unwrap_redirect_url(decode_html_entities(raw_href))
        if not is_web_url(url):
            logger.debug("Skipping block with unusable link", extra={"url": url})
            return None

        snippet_anchor = _find_anchor(block, "result__snippet")
        snippet = clean_text(snippet_anchor[1]) if snippet_anchor else ""

        display_match = _DISPLAY_URL_RE.search(block)
        display_url = clean_text(display_match.group(2)) if display_match else ""

        return _build_result(
            title=clean_text(title_html),
            url=url,
            snippet=snippet,
            display_url=display_url or display_host(url),
        )


class LinkHarvestExtractor:
    """Positional pairing of redirect links with snippet cells.

    The Nth link gets the Nth snippet. This ignores document structure, so a
    page with a stray link or a missing snippet shifts every later pairing.
    """

    name = "fallback"

    def extract(self, html: str, max_results: int) -> list[SearchResult]:
        links = [
            (unquote(encoded), clean_text(title_html))
            for encoded, title_html in _REDIRECT_LINK_RE.findall(html)
        ]
        snippets = [clean_text(cell) for cell in _SNIPPET_CELL_RE.findall(html)]

        results: list[SearchResult] = []
        for index, (url, title) in enumerate(links):
            if len(results) >= max_results:
                break
            if not is_web_url(url) or len(title) <= 3:
                continue

            snippet = snippets[index] if index < len(snippets) else ""
            result = _build_result(
                title=title,
                url=url,
                snippet=snippet or FALLBACK_SNIPPET,
                display_url=display_host(url),
            )
            if result is not None:
                results.append(result)

        return results


DEFAULT_EXTRACTORS: tuple[ResultExtractor, ...] = (
    PrimaryBlockExtractor(),
    LinkHarvestExtractor(),
)


def extract_results(
    html: str,
    max_results: int,
    extractors: Iterable[ResultExtractor] = DEFAULT_EXTRACTORS,
) -> list[SearchResult]:
    """Run extractors in order and return the first non-empty result list.

    Raises:
        SearchParseError: If an extractor fails outright
    """
    for extractor in extractors:
        try:
            results = extractor.extract(html, max_results)
        except Exception as e:
            raise SearchParseError(f"{extractor.name} parser failed: {e}") from e

        if results:
            logger.debug(
                f"{extractor.name} parser extracted {len(results)} results",
                extra={"parser": extractor.name},
            )
            return results[:max_results]

    return []
