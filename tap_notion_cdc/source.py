"""NotionSource: incremental change capture over Notion pages.

The host drives the source through ``configure()``, ``open()`` and repeated
``read()`` calls. Each ``read()`` returns one record, or raises `RetryLater`
when there is nothing new. Internally the source alternates between two
phases:

- polling: when the fetch queue is empty, wait for the poll interval (except
  before the very first poll), then search for pages edited after the
  watermark and queue them, oldest first;
- draining: pop the head of the queue, fetch the full page and turn it into a
  record.

Notion's ``last_edited_time`` only has minute precision and the next search
asks for pages edited strictly after the watermark. The watermark therefore
only moves to a page's edit time once no other page from that minute can
still be waiting in the queue or still be missing from the last search; see
`ReadState.can_advance_to`.
"""

from __future__ import annotations

import collections
import dataclasses
import datetime
import logging
import threading
import time
import typing as t

from .client import NotionClient
from .config import Config, parse_config
from .errors import PageNotFoundError, ReadCancelled, RetryLater, SourceNotOpenError
from .position import Position
from .records import Record, to_record
from .timestamps import ZERO_TIME, format_rfc3339, truncate_to_minute, utc_now

if t.TYPE_CHECKING:
    from .models import Page

logger = logging.getLogger(__name__)


class Client(t.Protocol):
    """What the source needs from a Notion client."""

    def init(self, token: str) -> None:
        """Initialize the client with the given access token."""

    def get_page(self, page_id: str) -> Page:
        """Get a page with the given ID, including all of its blocks."""

    def get_pages(self, edited_after: datetime.datetime) -> list[Page]:
        """Return all pages edited after the given time, oldest first, without blocks."""


@dataclasses.dataclass
class ReadState:
    """Cursor state of a source; only the read loop writes to it.

    Attributes:
        watermark: Last edit time up to which every page has been read.
        queue: Pages (search metadata) waiting to be fetched, oldest first.
        last_poll: Start time of the last successful search, None before the first one.
    """

    watermark: datetime.datetime = ZERO_TIME
    queue: collections.deque[Page] = dataclasses.field(default_factory=collections.deque)
    last_poll: datetime.datetime | None = None

    def can_advance_to(self, edited: datetime.datetime) -> bool:
        """Whether the watermark may move to ``edited``.

        Holds only when the minute of ``edited`` was over before the last
        search started (so the search saw every page from that minute), no
        queued page was edited at or before ``edited``, and the watermark
        would not move backwards.
        """
        if self.last_poll is None or edited <= self.watermark:
            return False
        if edited >= truncate_to_minute(self.last_poll):
            return False
        return all(queued.last_edited_time > edited for queued in self.queue)

    def advance(self, edited: datetime.datetime) -> bool:
        if not self.can_advance_to(edited):
            return False
        self.watermark = edited
        return True


class NotionSource:
    """Change-capture source for Notion pages.

    Args:
        client: Notion client; one is built from the configuration when omitted.
        clock: Returns the current UTC time; used to timestamp polls.
    """

    def __init__(
        self,
        client: Client | None = None,
        clock: t.Callable[[], datetime.datetime] = utc_now,
    ) -> None:
        self.client = client
        self.config: Config | None = None
        self.state = ReadState()
        self._clock = clock
        self._opened = False

    @property
    def pending_pages(self) -> int:
        """Number of pages from the last poll still waiting to be read."""
        return len(self.state.queue)

    @staticmethod
    def parameters() -> dict[str, dict[str, t.Any]]:
        """Describe the configuration parameters the source accepts."""
        return {
            "token": {
                "default": "",
                "required": True,
                "description": "Internal integration token.",
            },
            "pollInterval": {
                "default": "1m",
                "required": False,
                "description": "Interval at which Notion is polled for changes. A Go duration string.",
            },
            "notionVersion": {
                "default": "2022-06-28",
                "required": False,
                "description": "Value of the Notion-Version header.",
            },
            "pageSize": {
                "default": "100",
                "required": False,
                "description": "Items per page for search and block children requests (max 100).",
            },
            "userAgent": {
                "default": "",
                "required": False,
                "description": "Custom User-Agent header sent with each request.",
            },
        }

    def configure(self, cfg: t.Mapping[str, str | None]) -> None:
        """Validate and store the configuration.

        Raises:
            ConfigError: the configuration is invalid.
        """
        logger.info("configuring Notion source")
        self.config = parse_config(cfg)

        if self.client is None:
            self.client = NotionClient(
                notion_version=self.config.notion_version,
                page_size=self.config.page_size,
                user_agent=self.config.user_agent,
            )

    def open(self, position: bytes | str | None = None) -> None:
        """Initialize the client and restore the watermark from a saved position.

        Raises:
            SourceNotOpenError: the source has not been configured.
            PositionError: the saved position cannot be decoded.
        """
        if self.config is None or self.client is None:
            raise SourceNotOpenError("source must be configured before it is opened")

        self.client.init(self.config.token)
        self.state = ReadState()

        if position:
            saved = Position.from_bytes(position)
            self.state.watermark = saved.last_edited_time
            logger.info(
                "resuming from position (page %s, last edited %s)",
                saved.id or "-",
                format_rfc3339(saved.last_edited_time),
            )

        self._opened = True

    def read(self, cancel: threading.Event | None = None) -> Record:
        """Return the next changed page as a record.

        Args:
            cancel: Event which, once set, interrupts the wait before a poll.

        Raises:
            RetryLater: no page is waiting to be read; call again later.
            ReadCancelled: ``cancel`` was set while waiting to poll.
            NotionAPIError: searching or fetching a page failed.
        """
        if not self._opened:
            raise SourceNotOpenError("source must be opened before reading")

        self._populate_queue(cancel)
        return self._next_record()

    def ack(self, position: bytes) -> None:
        """Positions need no acknowledgement."""

    def teardown(self) -> None:
        """Nothing to release; the source can be torn down without being opened."""
        self._opened = False

    def _next_record(self) -> Record:
        while self.state.queue:
            queued = self.state.queue.popleft()
            logger.debug("fetching page %s", queued.id)

            try:
                page = self.client.get_page(queued.id)
            except PageNotFoundError:
                # The page was deleted or unshared after it was listed.
                logger.info(
                    "page %s does not exist or has not been shared with the integration, skipping",
                    queued.id,
                )
                continue

            if self.state.advance(page.last_edited_time):
                logger.debug("watermark advanced to %s", format_rfc3339(self.state.watermark))

            position = Position(id=page.id, last_edited_time=self.state.watermark)
            return to_record(page, position)

        raise RetryLater("no changed pages to read")

    def _populate_queue(self, cancel: threading.Event | None) -> None:
        if self.state.queue:
            return

        # No wait before the first poll.
        if self.state.last_poll is not None:
            self._wait(self.config.poll_interval, cancel)

        poll_time = self._clock()
        logger.debug("searching for pages edited after %s", format_rfc3339(self.state.watermark))
        pages = self.client.get_pages(self.state.watermark)

        # Only a successful search may move last_poll, otherwise changes made
        # during a failed search could be missed by the next one.
        self.state.last_poll = poll_time
        self.state.queue.extend(pages)
        logger.debug("queued %d pages", len(self.state.queue))

    def _wait(self, interval: datetime.timedelta, cancel: threading.Event | None) -> None:
        seconds = interval.total_seconds()
        logger.debug("sleeping %ss before checking for changes", seconds)

        if cancel is None:
            time.sleep(seconds)
            return

        if cancel.wait(seconds):
            raise ReadCancelled("read cancelled while waiting for the next poll")
