"""Tests for block text extraction."""

import logging

import pytest

from tap_notion_cdc.errors import NoExtractorError
from tap_notion_cdc.extraction import EXTRACTORS, extract_text, page_plain_text, unsupported
from tap_notion_cdc.models import Block, Page

from .conftest import paragraph


def rich_text(*texts):
    return [{"type": "text", "plain_text": text} for text in texts]


@pytest.mark.parametrize(
    "block_type",
    [
        "paragraph",
        "heading_1",
        "heading_2",
        "heading_3",
        "callout",
        "quote",
        "bulleted_list_item",
        "numbered_list_item",
        "to_do",
        "toggle",
        "code",
        "template",
    ],
)
def test_rich_text_blocks(block_type):
    block = Block(id="b1", type=block_type, payload={"rich_text": rich_text("Hello", "world")})

    assert extract_text(block) == "Hello world "


def test_rich_text_block_without_fragments():
    assert extract_text(Block(id="b1", type="paragraph", payload={"rich_text": []})) == ""


@pytest.mark.parametrize("block_type", ["child_page", "child_database"])
def test_title_blocks(block_type):
    block = Block(id="b1", type=block_type, payload={"title": "Meeting notes"})

    assert extract_text(block) == "Meeting notes"


@pytest.mark.parametrize("block_type", ["embed", "bookmark", "link_preview"])
def test_url_blocks(block_type):
    block = Block(
        id="b1",
        type=block_type,
        payload={"url": "https://example.com", "caption": rich_text("an", "example")},
    )

    assert extract_text(block) == "https://example.com an example"


@pytest.mark.parametrize("block_type", ["file", "image", "video", "pdf"])
def test_file_blocks(block_type):
    hosted = Block(
        id="b1",
        type=block_type,
        payload={"type": "file", "file": {"url": "https://s3.example.com/a.png", "expiry_time": "x"}},
    )
    external = Block(
        id="b2",
        type=block_type,
        payload={"type": "external", "external": {"url": "https://example.com/b.png"}},
    )

    assert extract_text(hosted) == "https://s3.example.com/a.png "
    assert extract_text(external) == " https://example.com/b.png"


def test_equation_block():
    block = Block(id="b1", type="equation", payload={"expression": "e=mc^2"})

    assert extract_text(block) == "e=mc^2"


@pytest.mark.parametrize("block_type", ["unsupported", "divider", "table_of_contents", "synced_block"])
def test_unknown_block_types_have_no_extractor(block_type):
    with pytest.raises(NoExtractorError) as exc_info:
        extract_text(Block(id="b1", type=block_type))

    assert exc_info.value.block_type == block_type


def test_unknown_types_are_not_registered():
    assert "unsupported" not in EXTRACTORS
    assert unsupported not in EXTRACTORS.values()


def test_page_plain_text_skips_blocks_without_extractor(caplog):
    page = Page(
        id="p1",
        children=(
            paragraph("b1", "first"),
            Block(id="b2", type="divider"),
            Block(id="b3", type="equation", payload={"expression": "x"}),
        ),
    )

    with caplog.at_level(logging.WARNING, logger="tap_notion_cdc.extraction"):
        text = page_plain_text(page)

    assert text == "first \nx\n"
    assert "divider" in caplog.text


def test_page_plain_text_without_children():
    assert page_plain_text(Page(id="p1")) == ""
