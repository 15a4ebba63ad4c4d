"""Shared fixtures: an in-memory Notion client and page builders."""

from __future__ import annotations

import datetime

import pytest

from tap_notion_cdc.errors import PageNotFoundError
from tap_notion_cdc.models import Block, Page

NOW = datetime.datetime(2024, 5, 1, 12, 0, 30, tzinfo=datetime.timezone.utc)


def minute(delta: datetime.timedelta) -> datetime.datetime:
    """Notion-style (minute precision) edit time ``delta`` before NOW."""
    return (NOW - delta).replace(second=0, microsecond=0)


def make_page(page_id: str, last_edited: datetime.datetime, children=()) -> Page:
    return Page(
        id=page_id,
        url=f"https://www.notion.so/{page_id}",
        created_time=last_edited - datetime.timedelta(days=1),
        last_edited_time=last_edited,
        properties={
            "title": {
                "id": "title",
                "type": "title",
                "title": [{"type": "text", "plain_text": f"Page {page_id}"}],
            },
        },
        children=tuple(children),
    )


def paragraph(block_id: str, *texts: str) -> Block:
    return Block(
        id=block_id,
        type="paragraph",
        payload={"rich_text": [{"type": "text", "plain_text": text} for text in texts]},
    )


class FakeClient:
    """In-memory stand-in for NotionClient.

    Each call to ``get_pages`` consumes the next batch in ``polls`` and
    applies the same strict ``edited_after`` filter the real client does.
    """

    def __init__(self, polls=(), missing=()) -> None:
        self.polls = [list(batch) for batch in polls]
        self.pages = {page.id: page for batch in self.polls for page in batch}
        self.missing = set(missing)
        self.token: str | None = None
        self.get_pages_calls: list[datetime.datetime] = []
        self.get_page_calls: list[str] = []

    def init(self, token: str) -> None:
        self.token = token

    def get_pages(self, edited_after: datetime.datetime) -> list[Page]:
        self.get_pages_calls.append(edited_after)
        batch = self.polls.pop(0) if self.polls else []
        return [page for page in batch if page.last_edited_time > edited_after]

    def get_page(self, page_id: str) -> Page:
        self.get_page_calls.append(page_id)
        if page_id in self.missing:
            raise PageNotFoundError(page_id)
        return self.pages[page_id]


@pytest.fixture
def fixed_clock():
    """Clock pinned to NOW."""
    return lambda: NOW
