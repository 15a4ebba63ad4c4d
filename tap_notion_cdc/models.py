"""Notion pages and blocks as consumed by the source.

Both are built from the raw JSON objects returned by the Notion API and are
immutable once built: a `Page` from search results carries no children, a
`Page` from `NotionClient.get_page` carries its whole block tree flattened in
pre-order.
"""

from __future__ import annotations

import dataclasses
import datetime
import json
import typing as t

from .timestamps import ZERO_TIME, parse_iso8601

# Block type Notion uses for blocks it cannot represent through the API.
UNSUPPORTED_BLOCK_TYPE = "unsupported"


def to_json(value: t.Any) -> str:
    """Serialize ``value`` to compact JSON, or return an empty string if that fails."""
    if value is None:
        return ""
    try:
        return json.dumps(value, separators=(",", ":"), sort_keys=True)
    except (TypeError, ValueError):
        return ""


def _timestamp(raw: dict, key: str) -> datetime.datetime:
    value = raw.get(key)
    if not value:
        return ZERO_TIME
    return parse_iso8601(value)


@dataclasses.dataclass(frozen=True)
class Block:
    id: str
    type: str
    payload: dict = dataclasses.field(default_factory=dict)
    has_children: bool = False

    @classmethod
    def from_api(cls, raw: dict) -> Block:
        block_type = raw.get("type") or UNSUPPORTED_BLOCK_TYPE
        return cls(
            id=raw.get("id", ""),
            type=block_type,
            payload=raw.get(block_type) or {},
            has_children=bool(raw.get("has_children")),
        )

    @property
    def is_unsupported(self) -> bool:
        return self.type == UNSUPPORTED_BLOCK_TYPE


@dataclasses.dataclass(frozen=True)
class Page:
    id: str
    parent: str = ""
    url: str = ""
    created_by: str = ""
    created_time: datetime.datetime = ZERO_TIME
    last_edited_by: str = ""
    last_edited_time: datetime.datetime = ZERO_TIME
    archived: bool = False
    properties: dict = dataclasses.field(default_factory=dict)
    children: tuple[Block, ...] = ()

    @classmethod
    def from_api(cls, raw: dict, children: t.Iterable[Block] = ()) -> Page:
        return cls(
            id=raw.get("id", ""),
            parent=to_json(raw.get("parent")),
            url=raw.get("url") or "",
            created_by=to_json(raw.get("created_by")),
            created_time=_timestamp(raw, "created_time"),
            last_edited_by=to_json(raw.get("last_edited_by")),
            last_edited_time=_timestamp(raw, "last_edited_time"),
            archived=bool(raw.get("archived")),
            properties=raw.get("properties") or {},
            children=tuple(children),
        )

    @property
    def title(self) -> str:
        """Plain text of the first fragment of the page's title property.

        Regular pages name it ``title``; pages inside a database use the
        database's title column, so any property of type ``title`` counts.
        Returns an empty string when no title is present.
        """
        title_property = self.properties.get("title")
        if not isinstance(title_property, dict) or title_property.get("type") != "title":
            title_property = next(
                (
                    prop
                    for prop in self.properties.values()
                    if isinstance(prop, dict) and prop.get("type") == "title"
                ),
                None,
            )
        if not title_property:
            return ""

        fragments = title_property.get("title") or []
        if not fragments:
            return ""
        return fragments[0].get("plain_text", "")
