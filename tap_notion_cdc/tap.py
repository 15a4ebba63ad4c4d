"""Singer Tap entrypoint for Notion change capture.

This module defines the TapNotionCDC class, which is the entrypoint the
Singer SDK uses to run the tap. It declares:

- The tap name and configuration schema (settings users can provide).
- The single `pages` stream, which hosts the change-capture source.
"""

from __future__ import annotations

import sys

from singer_sdk import Tap
from singer_sdk import typing as th  # JSON schema typing helpers

from . import streams

if sys.version_info >= (3, 12):
    from typing import override
else:
    from typing_extensions import override


class TapNotionCDC(Tap):
    """Singer Tap for incremental capture of changed Notion pages.

    Configuration is defined in `config_jsonschema` and includes:
    - token (required): Notion integration token used for Bearer auth.
    - poll_interval (optional): Go duration string, at least one minute.
    - notion_version, page_size, user_agent (optional): Header/behavior tweaks.
    """

    name = "tap-notion-cdc"

    config_jsonschema = th.PropertiesList(
        th.Property(
            "token",
            th.StringType(nullable=False),
            required=True,
            secret=True,  # Internal integration token from Notion
            title="Integration Token",
            description="The Notion internal integration token.",
        ),
        th.Property(
            "poll_interval",
            th.StringType(nullable=True),
            description=(
                "Interval between two searches for changed pages, as a Go duration "
                "string (e.g. '90s', '2m'). Must not be shorter than a minute. Default '1m'."
            ),
        ),
        th.Property(
            "notion_version",
            th.StringType(nullable=True),
            title="Notion API Version",
            description="Override the Notion-Version header (default '2022-06-28').",
        ),
        th.Property(
            "page_size",
            th.IntegerType(nullable=True),
            description="Items per page for search and block children requests (max 100).",
        ),
        th.Property(
            "user_agent",
            th.StringType(nullable=True),
            description="A custom User-Agent header to send with each request.",
        ),
    ).to_dict()

    @override
    def discover_streams(self) -> list[streams.PagesStream]:
        """Return the `pages` stream."""
        return [streams.PagesStream(self)]


if __name__ == "__main__":
    TapNotionCDC.cli()
