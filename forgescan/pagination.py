"""Page-walking helper shared by the forge clients."""

import logging
from collections.abc import Callable, Mapping
from typing import TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 100


def paginate(
    base_endpoint: str,
    fetch_page: Callable[[str], tuple[list[T], bool]],
    page_size: int = DEFAULT_PAGE_SIZE,
    page_param: str = "page",
    limit_param: str = "per_page",
) -> list[T]:
    """
    Fetch every page of a listing endpoint.

    Args:
        base_endpoint: Endpoint without paging parameters; may already carry a query
        fetch_page: Called with the full endpoint of one page; returns the page's
            items and whether the forge reports more pages
        page_size: Items requested per page
        page_param: Name of the page-number parameter
        limit_param: Name of the page-size parameter ("per_page" or "limit")

    Returns:
        Items of all pages, in page order

    Raises:
        Whatever ``fetch_page`` raises; no partial result is returned
    """
    if page_size < 1:
        raise ValueError(f"page_size must be >= 1, got {page_size}")

    results: list[T] = []
    separator = "&" if "?" in base_endpoint else "?"
    page = 1

    while True:
        endpoint = f"{base_endpoint}{separator}{page_param}={page}&{limit_param}={page_size}"
        items, has_more = fetch_page(endpoint)
        results.extend(items)

        if not has_more or len(items) < page_size:
            break
        page += 1

    logger.debug(f"Fetched {len(results)} items in {page} page(s) from {base_endpoint}")
    return results


def has_next_link(headers: Mapping[str, str]) -> bool:
    """True when an RFC 8288 ``Link`` header advertises a ``rel="next"`` page."""
    link = headers.get("link") or headers.get("Link") or ""
    for part in link.split(","):
        params = [p.strip() for p in part.split(";")[1:]]
        if 'rel="next"' in params or "rel=next" in params:
            return True
    return False
