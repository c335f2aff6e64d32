"""Insert-or-overwrite by primary key.

Learn: Every service saves through this one function:
- no row with the entity's primary key → INSERT the entity
- row exists → copy the entity's assigned column values onto the
  persistent row in place (same identity, new values) and UPDATE

The lookup uses SELECT ... FOR UPDATE, so two concurrent upserts of the
same key serialize on the row lock and the last writer wins. SQLite has
no row locks and silently drops the clause; its writes serialize on the
database lock instead.

Unchanged values produce no UPDATE at all: SQLAlchemy only flushes
attributes whose value actually changed.
"""

from typing import TypeVar

from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import AsyncSession

from quill.db.models import Base

ModelT = TypeVar("ModelT", bound=Base)


async def upsert(db: AsyncSession, entity: ModelT) -> ModelT:
    """Save ``entity`` and return the now-current persistent row."""
    mapper = inspect(type(entity))
    pk = mapper.primary_key_from_instance(entity)
    if any(v is None for v in pk):
        # No key yet, so nothing to collide with.
        db.add(entity)
        await db.commit()
        return entity

    identity = pk[0] if len(pk) == 1 else tuple(pk)
    # Relationships on a not-yet-added entity must not autoflush here.
    with db.no_autoflush:
        existing = await db.get(type(entity), identity, with_for_update=True)

    if existing is None:
        db.add(entity)
    elif existing is not entity:
        pk_keys = {mapper.get_property_by_column(c).key for c in mapper.primary_key}
        for attr in mapper.column_attrs:
            if attr.key in pk_keys or attr.key not in entity.__dict__:
                continue
            setattr(existing, attr.key, getattr(entity, attr.key))
        entity = existing

    await db.commit()
    return entity
