"""REST pagination via the `Link` response header.

GitHub list endpoints advertise the following page as
`Link: <https://api.github.com/...&page=2>; rel="next", <...>; rel="last"`.
Only the `next` relation is followed.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable, Mapping
from typing import TYPE_CHECKING, Any

from github_pr_bot.logging import get_logger

from .exceptions import GitHubProtocolError

if TYPE_CHECKING:
    from githubkit.response import Response

logger = get_logger(__name__)

PageRequest = Callable[[str, Mapping[str, Any] | None], Awaitable["Response[Any]"]]
"""Fetches one page: (url, params) -> response."""


def next_page_url(response: Response[Any]) -> str | None:
    """Extract the `rel="next"` URL from a list response.

    Args:
        response: githubkit response of a list endpoint

    Returns:
        URL of the next page, or None on the last page

    Raises:
        GitHubProtocolError: If the Link header is missing or unparsable
    """
    if not response.headers.get("link"):
        raise GitHubProtocolError("missing link header")

    links = response.raw_response.links
    if not any("rel" in link for link in links.values()):
        raise GitHubProtocolError(f"unable to parse link header: {response.headers['link']!r}")

    next_link = links.get("next")
    if next_link is None:
        return None
    return next_link["url"]


async def paginate_link_header(
    request: PageRequest,
    url: str,
    params: Mapping[str, Any] | None = None,
) -> AsyncIterator[Any]:
    """Yield every item of a paginated REST list endpoint.

    Pages are fetched one at a time: all items of a page are yielded before
    the next page is requested, and nothing more is fetched once the caller
    stops iterating. `params` only apply to the first request; later pages
    use the `next` URL verbatim.

    A page is validated before any of its items are yielded, so a page with
    a missing or broken Link header produces no items.

    Args:
        request: Coroutine function performing one GET
        url: First page URL (relative to the API base)
        params: Query parameters of the first page

    Yields:
        Decoded JSON items in response order

    Raises:
        GitHubProtocolError: On a missing/unparsable Link header or a non-list body
    """
    page_url: str | None = url
    page_params = params
    page_number = 0

    while page_url is not None:
        page_number += 1
        logger.debug("Fetching page {page} of {url}", page=page_number, url=page_url)
        response = await request(page_url, page_params)

        items = response.json()
        if not isinstance(items, list):
            raise GitHubProtocolError(f"expected a list response from {page_url}")

        page_url = next_page_url(response)
        page_params = None

        for item in items:
            yield item
