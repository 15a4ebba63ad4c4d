"""Plain-text extraction from Notion blocks.

Every block type with textual content maps to one extractor function in
`EXTRACTORS`. A block type outside that table resolves to `unsupported`,
which raises `NoExtractorError`; callers skip such blocks and keep going.
"""

from __future__ import annotations

import logging
import typing as t

from .errors import NoExtractorError

if t.TYPE_CHECKING:
    from .models import Block, Page

logger = logging.getLogger(__name__)

Extractor = t.Callable[["Block"], str]

# Appended after every rich text fragment.
RICH_TEXT_SEPARATOR = " "
# Appended after the text of every block in a page.
BLOCK_SEPARATOR = "\n"


def _plain_texts(items: t.Any) -> list[str]:
    return [item.get("plain_text") or "" for item in items or [] if isinstance(item, dict)]


def title_extractor(block: Block) -> str:
    """child_page / child_database: the nested title string."""
    return block.payload.get("title") or ""


def rich_text_extractor(block: Block) -> str:
    return "".join(text + RICH_TEXT_SEPARATOR for text in _plain_texts(block.payload.get("rich_text")))


def url_extractor(block: Block) -> str:
    """embed / bookmark / link_preview: the URL followed by the caption."""
    elements = [block.payload.get("url") or ""]
    elements.extend(_plain_texts(block.payload.get("caption")))
    return " ".join(elements)


def file_extractor(block: Block) -> str:
    """file / image / video / pdf: Notion-hosted URL and external URL, either may be empty."""
    hosted = (block.payload.get("file") or {}).get("url") or ""
    external = (block.payload.get("external") or {}).get("url") or ""
    return f"{hosted} {external}"


def equation_extractor(block: Block) -> str:
    return block.payload.get("expression") or ""


def unsupported(block: Block) -> str:
    raise NoExtractorError(block.type)


EXTRACTORS: dict[str, Extractor] = {
    "child_page": title_extractor,
    "child_database": title_extractor,

    "equation": equation_extractor,

    "file": file_extractor,
    "image": file_extractor,
    "video": file_extractor,
    "pdf": file_extractor,

    "paragraph": rich_text_extractor,
    "heading_1": rich_text_extractor,
    "heading_2": rich_text_extractor,
    "heading_3": rich_text_extractor,
    "callout": rich_text_extractor,
    "quote": rich_text_extractor,
    "bulleted_list_item": rich_text_extractor,
    "numbered_list_item": rich_text_extractor,
    "to_do": rich_text_extractor,
    "toggle": rich_text_extractor,
    "code": rich_text_extractor,
    "template": rich_text_extractor,

    "embed": url_extractor,
    "bookmark": url_extractor,
    "link_preview": url_extractor,
}


def extractor_for(block_type: str) -> Extractor:
    return EXTRACTORS.get(block_type, unsupported)


def extract_text(block: Block) -> str:
    """Return the plain text of a single block.

    Raises:
        NoExtractorError: the block's type has no registered extractor.
    """
    return extractor_for(block.type)(block)


def page_plain_text(page: Page) -> str:
    """Concatenate the text of all blocks in a page, one block per line.

    Blocks without an extractor are logged and skipped.
    """
    parts: list[str] = []
    for block in page.children:
        try:
            text = extract_text(block)
        except NoExtractorError:
            logger.warning(
                "no text extractor registered for block type %s (block %s, page %s)",
                block.type,
                block.id,
                page.id,
            )
            continue
        parts.append(text + BLOCK_SEPARATOR)
    return "".join(parts)
