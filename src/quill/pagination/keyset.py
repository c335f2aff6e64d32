"""Keyset query planner.

Learn: Given a base select() (no filter, by author, by tag), a cursor and
a page size, builds the bounded ordered range query:

    WHERE <base>
      AND (key < :ts OR (key = :ts AND id < :id))   -- only with a cursor
    ORDER BY key DESC, id DESC
    LIMIT :page_size + 1

where key = COALESCE(created_at, '0001-01-01'). The extra row only
answers "is there another page?" and is never returned. id breaks ties
because created_at alone is neither unique nor non-null.

As long as (key, id) pairs are unique, following next_cursor until
has_more is false visits every matching row exactly once, even while
other rows are being inserted.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from sqlalchemy import Select, and_, func, literal, or_
from sqlalchemy.ext.asyncio import AsyncSession

from quill.db.models import MIN_TIMESTAMP, UTCDateTime
from quill.pagination.cursor import Cursor


@dataclass
class Page:
    items: list[Any] = field(default_factory=list)
    has_more: bool = False

    def next_cursor(self) -> Optional[str]:
        """Cursor for the following page, or None on the last page."""
        if not self.has_more or not self.items:
            return None
        return Cursor.for_row(self.items[-1]).encode()


def sort_key(model):
    """created_at with NULL mapped to the minimum timestamp."""
    return func.coalesce(
        model.created_at, literal(MIN_TIMESTAMP, type_=UTCDateTime())
    )


def apply_seek(stmt: Select, model, cursor: Optional[Cursor]) -> Select:
    """Add the composite seek predicate and the keyset ordering."""
    key = sort_key(model)
    if cursor is not None:
        stmt = stmt.where(
            or_(
                key < cursor.created_at,
                and_(key == cursor.created_at, model.id < cursor.id),
            )
        )
    return stmt.order_by(key.desc(), model.id.desc())


async def fetch_page(
    db: AsyncSession,
    stmt: Select,
    model,
    page_size: int,
    cursor: Optional[Cursor] = None,
) -> Page:
    """Run one keyset page of ``stmt``.

    The planner imposes no upper bound on page_size; callers clamp it.
    """
    if page_size <= 0:
        # LIMIT 1 would still fetch a row and report has_more; a
        # zero-size page is defined as empty with has_more=False.
        return Page(items=[], has_more=False)

    stmt = apply_seek(stmt, model, cursor).limit(page_size + 1)
    result = await db.execute(stmt)
    rows = list(result.scalars().unique().all())

    has_more = len(rows) > page_size
    if has_more:
        rows = rows[:page_size]
    return Page(items=rows, has_more=has_more)
