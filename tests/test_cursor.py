"""Pagination cursor codec tests.

Learn: A cursor is "<ticks>_<uuid>". Decoding is total: anything that
doesn't parse comes back as None (first page), never an exception.
"""

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from quill.db.models import MIN_TIMESTAMP
from quill.pagination import Cursor, decode_cursor, encode_cursor
from quill.pagination.cursor import from_ticks, to_ticks

ROW_ID = uuid.UUID("3f2504e0-4f89-11d3-9a0c-0305e82c3301")


# ═══════════════════════════════════════════════════════════
# Encoding
# ═══════════════════════════════════════════════════════════


def test_epoch_encodes_as_zero_ticks():
    assert encode_cursor(MIN_TIMESTAMP, ROW_ID) == f"0_{ROW_ID}"


def test_missing_timestamp_encodes_as_zero_ticks():
    assert encode_cursor(None, ROW_ID) == f"0_{ROW_ID}"


def test_ticks_are_hundred_nanosecond_units():
    """Unix epoch is a well-known tick value: 621355968000000000."""
    unix_epoch = datetime(1970, 1, 1, tzinfo=timezone.utc)
    assert to_ticks(unix_epoch) == 621_355_968_000_000_000
    assert to_ticks(unix_epoch + timedelta(microseconds=1)) == 621_355_968_000_000_010


def test_naive_datetime_is_taken_as_utc():
    naive = datetime(2024, 5, 1, 12, 30)
    aware = naive.replace(tzinfo=timezone.utc)
    assert encode_cursor(naive, ROW_ID) == encode_cursor(aware, ROW_ID)


def test_offset_datetime_is_normalised_to_utc():
    plus_two = timezone(timedelta(hours=2))
    local = datetime(2024, 5, 1, 14, 30, tzinfo=plus_two)
    utc = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)
    assert encode_cursor(local, ROW_ID) == encode_cursor(utc, ROW_ID)


# ═══════════════════════════════════════════════════════════
# Round trip
# ═══════════════════════════════════════════════════════════


@pytest.mark.parametrize(
    "created_at",
    [
        MIN_TIMESTAMP,
        datetime(2024, 2, 29, 23, 59, 59, 999999, tzinfo=timezone.utc),
        datetime(9999, 12, 31, 23, 59, 59, 999999, tzinfo=timezone.utc),
    ],
)
def test_round_trip_is_exact_to_the_microsecond(created_at):
    decoded = decode_cursor(encode_cursor(created_at, ROW_ID))
    assert decoded == Cursor(created_at=created_at, id=ROW_ID)


def test_cursor_for_row_uses_created_at_and_id():
    class Row:
        created_at = datetime(2024, 1, 1, tzinfo=timezone.utc)
        id = ROW_ID

    cursor = Cursor.for_row(Row())
    assert cursor.encode() == encode_cursor(Row.created_at, ROW_ID)


def test_cursor_for_row_with_null_timestamp():
    class Row:
        created_at = None
        id = ROW_ID

    assert Cursor.for_row(Row()).created_at == MIN_TIMESTAMP


def test_foreign_sub_microsecond_ticks_truncate():
    """Ticks that aren't a multiple of 10 lose the sub-microsecond part."""
    cursor = decode_cursor(f"621355968000000017_{ROW_ID}")
    assert cursor is not None
    assert cursor.created_at == datetime(1970, 1, 1, 0, 0, 0, 1, tzinfo=timezone.utc)
    assert from_ticks(621355968000000017) == from_ticks(621355968000000010)


def test_uppercase_and_braceless_uuid_forms_decode():
    cursor = decode_cursor(f"0_{str(ROW_ID).upper()}")
    assert cursor is not None and cursor.id == ROW_ID
    cursor = decode_cursor(f"0_{ROW_ID.hex}")
    assert cursor is not None and cursor.id == ROW_ID


# ═══════════════════════════════════════════════════════════
# Rejection
# ═══════════════════════════════════════════════════════════


@pytest.mark.parametrize(
    "value",
    [
        None,
        "",
        "garbage",
        f"{ROW_ID}",
        f"123_{ROW_ID}_extra",
        f"abc_{ROW_ID}",
        f"12.5_{ROW_ID}",
        f"-10_{ROW_ID}",
        f"99999999999999999999999_{ROW_ID}",
        "123_not-a-uuid",
        "123_",
        f"_{ROW_ID}",
    ],
)
def test_malformed_cursor_decodes_to_none(value):
    assert decode_cursor(value) is None
