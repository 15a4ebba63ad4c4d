"""Exceptions raised by the Notion change-capture source."""

from __future__ import annotations


class NotionCDCError(Exception):
    """Base class for all errors raised by this package."""


class ConfigError(NotionCDCError, ValueError):
    """The source configuration is missing a value or holds an invalid one."""


class RequiredParamMissingError(ConfigError):
    """One or more required parameters are missing or blank."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(f"params {missing}: required parameter missing")


class NotionAPIError(NotionCDCError):
    """A request to the Notion API failed.

    Args:
        message: What was being done when the request failed.
        status: HTTP status code, when a response was received.
        code: Notion error code from the response body (e.g. ``rate_limited``).
    """

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        code: str | None = None,
    ) -> None:
        self.status = status
        self.code = code
        super().__init__(message)


class PageNotFoundError(NotionAPIError):
    """The page does not exist or was not shared with the integration."""

    def __init__(self, page_id: str) -> None:
        self.page_id = page_id
        super().__init__(f"page {page_id}: page not found", status=404, code="object_not_found")


class NoExtractorError(NotionCDCError, LookupError):
    """No text extractor is registered for a block type."""

    def __init__(self, block_type: str) -> None:
        self.block_type = block_type
        super().__init__(f"block type {block_type}: no extractor")


class RetryLater(NotionCDCError):
    """Nothing to read right now; the host should call ``read()`` again later."""


class ReadCancelled(NotionCDCError):
    """The wait before the next poll was cancelled by the caller."""


class PositionError(NotionCDCError, ValueError):
    """A serialized position could not be decoded."""


class SourceNotOpenError(NotionCDCError, RuntimeError):
    """``read()`` was called before the source was configured and opened."""
