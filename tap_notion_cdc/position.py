"""Resumable read position.

A position is handed to the host with every record and handed back on
startup. Only ``last_edited_time`` (the watermark) drives resumption: the
next search returns pages edited strictly after it. ``id`` names the page the
position was emitted with and is informational.
"""

from __future__ import annotations

import dataclasses
import datetime
import json

from .errors import PositionError
from .timestamps import ZERO_TIME, format_rfc3339, parse_iso8601


@dataclasses.dataclass(frozen=True)
class Position:
    id: str = ""
    last_edited_time: datetime.datetime = ZERO_TIME

    def to_bytes(self) -> bytes:
        """Serialize as ``{"ID": ..., "LastEditedTime": <RFC 3339>}``."""
        return json.dumps(
            {"ID": self.id, "LastEditedTime": format_rfc3339(self.last_edited_time)},
            separators=(",", ":"),
        ).encode("utf-8")

    @classmethod
    def from_bytes(cls, data: bytes | str) -> Position:
        try:
            raw = json.loads(data)
            return cls(
                id=raw.get("ID", ""),
                last_edited_time=parse_iso8601(raw["LastEditedTime"]),
            )
        except (ValueError, TypeError, KeyError, AttributeError) as exc:
            raise PositionError(f"failed unmarshalling position: {exc}") from exc
