"""Pagination cursor codec.

Cursor format: "<ticks>_<uuid>"

- ticks: 100-nanosecond intervals since 0001-01-01T00:00:00Z, decimal.
  Python datetimes stop at microseconds, so encoded values are always a
  multiple of 10; foreign cursors with finer ticks are truncated.
- uuid: canonical hyphenated form.

Learn: decoding never raises. Anything that doesn't parse decodes to
None, which callers treat as "first page". Cursors carry no
authorization meaning.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from quill.db.models import MIN_TIMESTAMP

TICKS_PER_MICROSECOND = 10
_MAX_TICKS = (
    (datetime.max.replace(tzinfo=timezone.utc) - MIN_TIMESTAMP)
    // timedelta(microseconds=1)
) * TICKS_PER_MICROSECOND + (TICKS_PER_MICROSECOND - 1)


@dataclass(frozen=True)
class Cursor:
    """Sort key of the last row served: (created_at, id)."""

    created_at: datetime
    id: uuid.UUID

    @classmethod
    def for_row(cls, row: Any) -> "Cursor":
        """Cursor for an entity with ``created_at`` and ``id``."""
        return cls(created_at=_as_utc(row.created_at), id=row.id)

    def encode(self) -> str:
        return encode_cursor(self.created_at, self.id)


def _as_utc(value: Optional[datetime]) -> datetime:
    if value is None:
        return MIN_TIMESTAMP
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_ticks(value: Optional[datetime]) -> int:
    micros = (_as_utc(value) - MIN_TIMESTAMP) // timedelta(microseconds=1)
    return micros * TICKS_PER_MICROSECOND


def from_ticks(ticks: int) -> datetime:
    return MIN_TIMESTAMP + timedelta(microseconds=ticks // TICKS_PER_MICROSECOND)


def encode_cursor(created_at: Optional[datetime], id: uuid.UUID) -> str:
    """Encode a row's sort key. A missing timestamp encodes as tick 0."""
    return f"{to_ticks(created_at)}_{id}"


def decode_cursor(value: Optional[str]) -> Optional[Cursor]:
    """Decode a cursor string, or return None if it is absent or malformed."""
    if not value:
        return None

    parts = value.split("_")
    if len(parts) != 2:
        return None
    ticks_part, id_part = parts

    try:
        ticks = int(ticks_part)
    except ValueError:
        return None
    if ticks < 0 or ticks > _MAX_TICKS:
        return None

    try:
        row_id = uuid.UUID(id_part)
    except ValueError:
        return None

    return Cursor(created_at=from_ticks(ticks), id=row_id)
