"""Turn fetched pages into records."""

from __future__ import annotations

import dataclasses
import datetime
import json

from .extraction import page_plain_text
from .models import Page
from .position import Position
from .timestamps import format_rfc3339, utc_now


@dataclasses.dataclass(frozen=True)
class Record:
    key: str
    plaintext: str
    metadata: dict[str, str]
    position: bytes
    created_at: datetime.datetime = dataclasses.field(default_factory=utc_now)

    @property
    def payload(self) -> bytes:
        """JSON payload: ``{"plaintext": ..., "metadata": {...}}``."""
        return json.dumps({"plaintext": self.plaintext, "metadata": self.metadata}).encode("utf-8")


def page_metadata(page: Page) -> dict[str, str]:
    return {
        "notion.title": page.title,
        "notion.url": page.url,
        "notion.createdTime": format_rfc3339(page.created_time),
        "notion.lastEditedTime": format_rfc3339(page.last_edited_time),
        "notion.createdBy": page.created_by,
        "notion.lastEditedBy": page.last_edited_by,
        "notion.archived": "true" if page.archived else "false",
        "notion.parent": page.parent,
    }


def to_record(page: Page, position: Position) -> Record:
    """Build the record for a fully fetched page, keyed by page id."""
    return Record(
        key=page.id,
        plaintext=page_plain_text(page),
        metadata=page_metadata(page),
        position=position.to_bytes(),
    )
