"""Tag service — create, rename, and keyset-paginated listing."""

import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from quill.db.models import Tag, utcnow
from quill.db.upsert import upsert
from quill.pagination import Cursor, Page, fetch_page
from quill.services.errors import DuplicateError, TagNotFoundError


class TagService:
    """Business logic for tags."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, tag_id: uuid.UUID) -> Tag | None:
        return await self.db.get(Tag, tag_id)

    async def list_all(self, page_size: int, cursor: Optional[Cursor] = None) -> Page:
        return await fetch_page(self.db, select(Tag), Tag, page_size, cursor)

    async def save(self, tag: Tag) -> Tag:
        # rollback() expires the instance, so read the name first.
        name = tag.name
        try:
            return await upsert(self.db, tag)
        except IntegrityError as e:
            await self.db.rollback()
            raise DuplicateError(f"Tag {name!r} already exists") from e

    async def create(self, name: str) -> Tag:
        return await self.save(Tag(id=uuid.uuid4(), name=name, created_at=utcnow()))

    async def rename(self, tag_id: uuid.UUID, name: str) -> Tag:
        """Rename a tag. created_at is kept, so cursors over tags stay valid."""
        tag = await self.get(tag_id)
        if tag is None:
            raise TagNotFoundError(f"Tag {tag_id} not found")
        tag.name = name
        return await self.save(tag)
