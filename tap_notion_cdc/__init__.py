"""tap_notion_cdc package: incremental change capture for Notion pages.

Contents:
- source.py: NotionSource, the read loop and its cursor state machine.
- client.py: NotionClient (auth, headers, search and block-tree pagination).
- extraction.py: block type to plain-text extractors.
- records.py: turns a fetched page into an emitted record.
- position.py: the resumable position handed back to the host.
- tap.py / streams.py: Singer host exposing the source as the `pages` stream.
"""

from .errors import (
    ConfigError,
    NoExtractorError,
    NotionAPIError,
    PageNotFoundError,
    ReadCancelled,
    RetryLater,
)
from .position import Position
from .source import NotionSource

__all__ = [
    "ConfigError",
    "NoExtractorError",
    "NotionAPIError",
    "NotionSource",
    "PageNotFoundError",
    "Position",
    "ReadCancelled",
    "RetryLater",
]
