"""Tests for position serialization."""

import datetime

import pytest

from tap_notion_cdc.errors import PositionError
from tap_notion_cdc.position import Position
from tap_notion_cdc.timestamps import ZERO_TIME


def test_serialized_format():
    position = Position(
        id="test-id",
        last_edited_time=datetime.datetime(2024, 1, 15, 10, 30, tzinfo=datetime.timezone.utc),
    )

    assert position.to_bytes() == b'{"ID":"test-id","LastEditedTime":"2024-01-15T10:30:00Z"}'


@pytest.mark.parametrize(
    "position",
    [
        Position(),
        Position(id="abc", last_edited_time=datetime.datetime(2022, 3, 1, 19, 5, tzinfo=datetime.timezone.utc)),
        Position(
            id="with-micros",
            last_edited_time=datetime.datetime(2022, 3, 1, 19, 5, 7, 123456, tzinfo=datetime.timezone.utc),
        ),
    ],
)
def test_round_trip(position):
    data = position.to_bytes()
    restored = Position.from_bytes(data)

    assert restored == position
    assert restored.to_bytes() == data


def test_zero_position():
    assert Position().to_bytes() == b'{"ID":"","LastEditedTime":"0001-01-01T00:00:00Z"}'
    assert Position.from_bytes(Position().to_bytes()).last_edited_time == ZERO_TIME


def test_offset_timestamps_are_normalized_to_utc():
    restored = Position.from_bytes('{"ID":"x","LastEditedTime":"2024-01-15T12:30:00+02:00"}')

    assert restored.last_edited_time == datetime.datetime(2024, 1, 15, 10, 30, tzinfo=datetime.timezone.utc)
    assert restored.to_bytes() == b'{"ID":"x","LastEditedTime":"2024-01-15T10:30:00Z"}'


@pytest.mark.parametrize("data", [b"", b"not json", b"[]", b'{"ID":"x"}', b'{"LastEditedTime":"yesterday"}'])
def test_invalid_position(data):
    with pytest.raises(PositionError):
        Position.from_bytes(data)


@pytest.mark.parametrize(
    ("timestamp", "microsecond"),
    [
        ("2024-05-01T10:00:00.5Z", 500000),
        ("2024-05-01T10:00:00.12Z", 120000),
        ("2024-05-01T10:00:00.123456789Z", 123456),
    ],
)
def test_any_fraction_length_is_accepted(timestamp, microsecond):
    restored = Position.from_bytes(f'{{"ID":"p1","LastEditedTime":"{timestamp}"}}')

    assert restored.last_edited_time == datetime.datetime(
        2024, 5, 1, 10, 0, 0, microsecond, tzinfo=datetime.timezone.utc,
    )
