"""Notion API client used by the source.

This module defines NotionClient, the collaborator the source reads through.
It covers exactly what change capture needs:

- Base URL and HTTP headers (Notion-Version and optional User-Agent).
- Authentication using a Notion integration token (Bearer auth).
- Searching all pages sorted by ``last_edited_time`` ascending, following
  ``next_cursor`` until ``has_more`` is false.
- Fetching a page and its whole block tree, walking nested children with an
  explicit stack and the standard Notion envelope:
  `{ "results": [...], "has_more": true, "next_cursor": "..." }`.

Failures are raised as NotionAPIError with the operation, id and cursor in
the message; a missing page is raised as PageNotFoundError so the caller can
skip it.
"""

from __future__ import annotations

import datetime
import logging
import typing as t

import requests
from singer_sdk.authenticators import BearerTokenAuthenticator
from singer_sdk.helpers.jsonpath import extract_jsonpath

from .config import DEFAULT_NOTION_VERSION, DEFAULT_PAGE_SIZE
from .errors import NotionAPIError, PageNotFoundError
from .models import Block, Page
from .timestamps import ZERO_TIME, format_rfc3339

logger = logging.getLogger(__name__)

# Seconds to wait for a single request before giving up.
REQUEST_TIMEOUT = 60


class NotionClient:
    """Minimal read-only Notion API client.

    Args:
        notion_version: Value of the Notion-Version header.
        page_size: Items per page for search and block children requests (max 100).
        user_agent: Optional User-Agent header.
        session: Requests session to use; a new one is created when omitted.
    """

    url_base = "https://api.notion.com/v1"

    # List endpoints return an envelope with `results`, `has_more` and `next_cursor`.
    records_jsonpath = "$.results[*]"

    def __init__(
        self,
        notion_version: str = DEFAULT_NOTION_VERSION,
        page_size: int = DEFAULT_PAGE_SIZE,
        user_agent: str | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.notion_version = notion_version
        self.page_size = page_size
        self.user_agent = user_agent
        self._session = session or requests.Session()

    @property
    def http_headers(self) -> dict[str, str]:
        """Return the HTTP headers including Notion-Version and optional UA."""
        headers: dict[str, str] = {"Notion-Version": self.notion_version}
        if self.user_agent:
            headers["User-Agent"] = self.user_agent
        return headers

    def init(self, token: str) -> None:
        """Authenticate every following request with the integration token."""
        authenticator = BearerTokenAuthenticator(token=token)
        self._session.headers.update(self.http_headers)
        self._session.headers.update(authenticator.auth_headers)

    def get_page(self, page_id: str) -> Page:
        """Fetch a page and all of its child and grandchild blocks.

        Raises:
            PageNotFoundError: the page was deleted or is not shared with the integration.
            NotionAPIError: any other failure while fetching the page or its blocks.
        """
        try:
            raw_page = self._request("GET", f"/pages/{page_id}", action=f"failed fetching page {page_id}")
        except NotionAPIError as exc:
            # Search results can be stale, and a page can be deleted between
            # being listed and being fetched.
            if exc.status == 404:
                raise PageNotFoundError(page_id) from exc
            raise

        # A 404 on the top-level blocks means the page went away after
        # GET /pages succeeded, which is the same as not finding it
        try:
            top_level = self._list_children(page_id)
        except NotionAPIError as exc:
            if exc.status == 404:
                raise PageNotFoundError(page_id) from exc
            raise _content_error(page_id, exc) from exc

        # Then every nested block below them
        try:
            children = self._walk_children(top_level)
        except NotionAPIError as exc:
            raise _content_error(page_id, exc) from exc

        return Page.from_api(raw_page, children)

    def get_pages(self, edited_after: datetime.datetime = ZERO_TIME) -> list[Page]:
        """Return metadata of all pages edited strictly after ``edited_after``.

        Pages come back in ascending ``last_edited_time`` order and without
        children.
        """
        pages: list[Page] = []
        cursor: str | None = None

        while True:
            # One page of search results, oldest edit first
            response_data = self._search_pages(cursor)
            results = list(extract_jsonpath(self.records_jsonpath, input=response_data))
            logger.debug("got search response with %d results", len(results))

            for result in results:
                object_type = str(result.get("object", "")).lower()
                if object_type != "page":
                    raise NotionAPIError(f"got unexpected object {object_type!r} in search results")

                # Metadata only, blocks are fetched later by get_page()
                page = Page.from_api(result)
                logger.debug(
                    "checking if page %s has changed (last edited %s)",
                    page.id,
                    format_rfc3339(page.last_edited_time),
                )
                # Strictly after: pages from the watermark minute were all read
                if page.last_edited_time > edited_after:
                    pages.append(page)

            cursor = response_data.get("next_cursor")
            if not response_data.get("has_more") or not cursor:
                break

        logger.info("found %d pages edited after %s", len(pages), format_rfc3339(edited_after))
        return pages

    def _search_pages(self, cursor: str | None) -> dict:
        """Compose and send one POST /search request.

        Notion expects cursor and page_size in the JSON body for POST
        endpoints. Results are restricted to pages and sorted oldest-first so
        that pages sharing an edit minute are listed next to each other.
        """
        payload: dict[str, t.Any] = {
            "filter": {"property": "object", "value": "page"},
            "sort": {"timestamp": "last_edited_time", "direction": "ascending"},
            "page_size": self.page_size,
        }
        if cursor:
            payload["start_cursor"] = cursor

        return self._request("POST", "/search", json=payload, action=f"search failed (cursor {cursor or ''!r})")

    def _walk_children(self, top_level: list[Block]) -> list[Block]:
        """Return ``top_level`` and all of their descendants flattened in pre-order.

        Uses an explicit stack instead of recursion so deeply nested pages
        cannot exhaust the interpreter stack. Children of ``unsupported``
        blocks are not requested.
        """
        blocks: list[Block] = []
        # Reversed so that pop() hands out blocks in document order
        stack = list(reversed(top_level))

        while stack:
            block = stack.pop()
            blocks.append(block)

            # Push the children on top, so they come right after their parent
            # and before the parent's next sibling
            if block.has_children and not block.is_unsupported:
                stack.extend(reversed(self._list_children(block.id)))

        return blocks

    def _list_children(self, block_id: str) -> list[Block]:
        """Fetch the direct children of a block (or page), following pagination."""
        children: list[Block] = []
        cursor: str | None = None

        while True:
            # First request: ?page_size=N, then ?page_size=N&start_cursor=...
            params: dict[str, t.Any] = {"page_size": self.page_size}
            if cursor:
                params["start_cursor"] = cursor

            response_data = self._request(
                "GET",
                f"/blocks/{block_id}/children",
                params=params,
                action=f"failed getting children for block ID {block_id}, cursor {cursor or ''!r}",
            )
            # Blocks live in the standard `results` envelope
            children.extend(
                Block.from_api(record) for record in extract_jsonpath(self.records_jsonpath, input=response_data)
            )

            # Notion sets has_more=false and next_cursor=null on the last page
            cursor = response_data.get("next_cursor")
            if not response_data.get("has_more") or not cursor:
                break

        return children

    def _request(
        self,
        method: str,
        path: str,
        *,
        action: str,
        params: dict[str, t.Any] | None = None,
        json: dict[str, t.Any] | None = None,
    ) -> dict:
        """Send a request and return the decoded JSON body.

        Raises:
            NotionAPIError: transport failure, non-2xx status or undecodable body.
        """
        try:
            response = self._session.request(
                method,
                f"{self.url_base}{path}",
                params=params,
                json=json,
                timeout=REQUEST_TIMEOUT,
            )
            response.raise_for_status()
            return response.json()
        except requests.HTTPError as exc:
            status, code, message = _error_details(exc.response)
            raise NotionAPIError(f"{action}: {message}", status=status, code=code) from exc
        except (requests.RequestException, ValueError) as exc:
            raise NotionAPIError(f"{action}: {exc}") from exc


def _content_error(page_id: str, exc: NotionAPIError) -> NotionAPIError:
    return NotionAPIError(f"failed fetching content for {page_id}: {exc}", status=exc.status, code=exc.code)


def _error_details(response: requests.Response | None) -> tuple[int | None, str | None, str]:
    """Pull status, Notion error code and message out of an error response."""
    if response is None:
        return None, None, "no response"

    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}

    message = body.get("message") or response.reason or f"HTTP {response.status_code}"
    return response.status_code, body.get("code"), f"{message} (status {response.status_code})"
