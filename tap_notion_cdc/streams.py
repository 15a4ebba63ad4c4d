"""Stream classes exposing the Notion source to Singer.

`PagesStream` hosts a `NotionSource`: one sync runs a single poll and drains
it, emitting one record per changed page. The source position travels in the
stream state under ``position`` so that the next run resumes from the last
safe watermark. When the source signals that nothing is left to read the run
ends; scheduling the next one is up to the orchestrator.
"""

from __future__ import annotations

import sys
import typing as t

from singer_sdk import typing as th  # JSON Schema typing helpers
from singer_sdk.streams import Stream

from . import config as config_keys
from .errors import RetryLater
from .source import NotionSource

if sys.version_info >= (3, 12):
    from typing import override
else:
    from typing_extensions import override

if t.TYPE_CHECKING:
    from singer_sdk import Tap
    from singer_sdk.helpers.types import Context

    from .records import Record

# Stream state key holding the serialized source position.
POSITION_STATE_KEY = "position"


class PagesStream(Stream):
    """Changed Notion pages with their content as plain text.

    - Source: POST /v1/search for changed pages, then GET /v1/pages/{id} and
      GET /v1/blocks/{id}/children for each of them.
    - Keys: Primary key is the page `id`.
    - State: the source position, not a replication key.
    """

    name = "pages"
    primary_keys: t.ClassVar[list[str]] = ["id"]
    replication_key = None

    schema = th.PropertiesList(
        th.Property("id", th.StringType, required=True),
        th.Property("title", th.StringType),
        th.Property("url", th.StringType),
        th.Property("created_time", th.DateTimeType),
        th.Property("last_edited_time", th.DateTimeType),
        th.Property("archived", th.BooleanType),
        # Text of every supported block, one block per line
        th.Property("plaintext", th.StringType),
        # notion.* metadata, all values as strings
        th.Property("metadata", th.ObjectType(additional_properties=th.StringType)),
        # Source position emitted with this page
        th.Property("position", th.StringType),
    ).to_dict()

    def __init__(self, tap: Tap, source: NotionSource | None = None) -> None:
        super().__init__(tap)
        self._source = source

    @property
    def source_config(self) -> dict[str, str | None]:
        """Map the tap settings onto the source configuration keys."""
        page_size = self.config.get("page_size")
        return {
            config_keys.TOKEN: self.config.get("token"),
            config_keys.POLL_INTERVAL: self.config.get("poll_interval"),
            config_keys.NOTION_VERSION: self.config.get("notion_version"),
            config_keys.PAGE_SIZE: str(page_size) if page_size else None,
            config_keys.USER_AGENT: self.config.get("user_agent"),
        }

    @override
    def get_records(self, context: Context | None) -> t.Iterable[dict]:
        """Read the pages found by one poll, then end the run.

        The position is written to the stream state before each record is
        yielded, so every state message emitted after a record covers it.
        Once the poll's queue is drained the run stops instead of waiting
        for the next poll; the orchestrator schedules the next run.
        """
        source = self._source or NotionSource()
        source.configure(self.source_config)

        state = self.get_context_state(context)
        source.open(state.get(POSITION_STATE_KEY))

        try:
            while True:
                # The first read polls Notion, the following ones drain the queue
                try:
                    record = source.read()
                except RetryLater:
                    self.logger.info("No more changed pages to read")
                    return

                # Save the position first so the next STATE message covers this record
                state[POSITION_STATE_KEY] = record.position.decode("utf-8")
                yield self._to_row(record)

                # Another read() would sleep for the poll interval and search again
                if not source.pending_pages:
                    self.logger.info("Read all pages found by this poll")
                    return
        finally:
            source.teardown()

    @staticmethod
    def _to_row(record: Record) -> dict:
        metadata = record.metadata
        return {
            "id": record.key,
            "title": metadata["notion.title"],
            "url": metadata["notion.url"],
            "created_time": metadata["notion.createdTime"],
            "last_edited_time": metadata["notion.lastEditedTime"],
            "archived": metadata["notion.archived"] == "true",
            "plaintext": record.plaintext,
            "metadata": dict(metadata),
            "position": record.position.decode("utf-8"),
        }
