"""Source configuration parsing.

The source is configured with a flat string map, the way connector hosts hand
over settings:

- ``token`` (required): Notion internal integration token.
- ``pollInterval`` (optional): Go-style duration string (``"90s"``, ``"2m"``,
  ``"1h30m"``) between two searches for changed pages. Notion's
  ``last_edited_time`` has minute precision, so anything shorter than a
  minute is rejected.
- ``notionVersion``, ``pageSize``, ``userAgent`` (optional): request tweaks
  passed on to the client.
"""

from __future__ import annotations

import dataclasses
import datetime
import re
import typing as t

from .errors import ConfigError, RequiredParamMissingError

TOKEN = "token"
POLL_INTERVAL = "pollInterval"
NOTION_VERSION = "notionVersion"
PAGE_SIZE = "pageSize"
USER_AGENT = "userAgent"

REQUIRED = (TOKEN,)

DEFAULT_POLL_INTERVAL = datetime.timedelta(minutes=1)
MIN_POLL_INTERVAL = datetime.timedelta(minutes=1)
DEFAULT_NOTION_VERSION = "2022-06-28"
DEFAULT_PAGE_SIZE = 100
MAX_PAGE_SIZE = 100

_DURATION_UNIT_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION_PART = re.compile(r"(\d+\.?\d*|\.\d+)(ns|us|µs|μs|ms|s|m|h)")


@dataclasses.dataclass(frozen=True)
class Config:
    token: str
    poll_interval: datetime.timedelta = DEFAULT_POLL_INTERVAL
    notion_version: str = DEFAULT_NOTION_VERSION
    page_size: int = DEFAULT_PAGE_SIZE
    user_agent: str | None = None


def parse_config(cfg: t.Mapping[str, str | None]) -> Config:
    """Validate a raw configuration map and apply defaults.

    Raises:
        RequiredParamMissingError: ``token`` is missing or blank.
        ConfigError: an optional value cannot be parsed or is out of range.
    """
    _check_required(cfg)

    options: dict[str, t.Any] = {"token": cfg[TOKEN]}

    raw_interval = cfg.get(POLL_INTERVAL)
    if raw_interval is not None:
        try:
            interval = parse_duration(raw_interval)
        except ValueError as exc:
            raise ConfigError(f"cannot parse poll interval {raw_interval!r}: {exc}") from exc
        if interval < MIN_POLL_INTERVAL:
            raise ConfigError(
                "poll interval must not be shorter than a minute "
                f"(provided: {format_duration(interval)})",
            )
        options["poll_interval"] = interval

    notion_version = cfg.get(NOTION_VERSION)
    if notion_version:
        options["notion_version"] = notion_version

    raw_page_size = cfg.get(PAGE_SIZE)
    if raw_page_size is not None and str(raw_page_size).strip():
        try:
            page_size = int(raw_page_size)
        except ValueError as exc:
            raise ConfigError(f"cannot parse page size {raw_page_size!r}") from exc
        if not 1 <= page_size <= MAX_PAGE_SIZE:
            raise ConfigError(f"page size must be between 1 and {MAX_PAGE_SIZE} (provided: {page_size})")
        options["page_size"] = page_size

    user_agent = cfg.get(USER_AGENT)
    if user_agent:
        options["user_agent"] = user_agent

    return Config(**options)


def _check_required(cfg: t.Mapping[str, str | None]) -> None:
    missing = [key for key in REQUIRED if not (cfg.get(key) or "").strip(" ")]
    if missing:
        raise RequiredParamMissingError(missing)


def parse_duration(value: str) -> datetime.timedelta:
    """Parse a Go-style duration string such as ``"1h30m"`` or ``"2.5s"``.

    A duration is an optionally signed sequence of decimal numbers, each with
    a unit suffix. ``"0"`` is accepted on its own.

    Raises:
        ValueError: the string is not a valid duration.
    """
    text = value.strip()
    if not text:
        raise ValueError(f"invalid duration {value!r}")

    sign = 1
    if text[0] in "+-":
        sign = -1 if text[0] == "-" else 1
        text = text[1:]

    if text == "0":
        return datetime.timedelta(0)

    total_seconds = 0.0
    position = 0
    while position < len(text):
        match = _DURATION_PART.match(text, position)
        if match is None:
            raise ValueError(f"invalid duration {value!r}")
        number, unit = match.groups()
        total_seconds += float(number) * _DURATION_UNIT_SECONDS[unit]
        position = match.end()

    if position == 0:
        raise ValueError(f"invalid duration {value!r}")

    return datetime.timedelta(seconds=sign * total_seconds)


def format_duration(value: datetime.timedelta) -> str:
    """Render a duration the way Go prints it, e.g. ``1s``, ``1m30s``, ``2h0m0s``."""
    total_seconds = value.total_seconds()
    if total_seconds == 0:
        return "0s"

    sign = "-" if total_seconds < 0 else ""
    total_seconds = abs(total_seconds)

    if total_seconds < 1:
        milliseconds = total_seconds * 1000
        return f"{sign}{milliseconds:g}ms"

    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    seconds_text = f"{seconds:g}s"
    if hours:
        return f"{sign}{int(hours)}h{int(minutes)}m{seconds_text}"
    if minutes:
        return f"{sign}{int(minutes)}m{seconds_text}"
    return f"{sign}{seconds_text}"
