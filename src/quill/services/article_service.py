"""Article service — CRUD, status changes, and keyset-paginated listings.

Learn: All three listings (everything, by author, by tag) share one
planner, fetch_page(). They only differ in the base WHERE clause, so a
cursor from one listing must not be replayed against another: it would
silently resume at an unrelated position rather than fail.
"""

import uuid
from typing import Optional

import structlog
from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from quill.db.models import Article, ArticleStatus, Tag, User, utcnow
from quill.db.upsert import upsert
from quill.pagination import Cursor, Page, fetch_page
from quill.services.errors import (
    ArticleNotFoundError,
    InvalidStatusError,
    UserNotFoundError,
)

logger = structlog.get_logger()

# Statuses reachable through change_status(); drafts are only ever created.
SETTABLE_STATUSES = {ArticleStatus.PUBLISHED.value, ArticleStatus.HIDDEN.value}


def _articles() -> Select:
    return select(Article).options(selectinload(Article.tags))


class ArticleService:
    """Business logic for articles."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Reads ──────────────────────────────────────────

    async def get(self, article_id: uuid.UUID) -> Article | None:
        result = await self.db.execute(_articles().where(Article.id == article_id))
        return result.scalars().first()

    async def list_all(
        self, page_size: int, cursor: Optional[Cursor] = None
    ) -> Page:
        return await fetch_page(self.db, _articles(), Article, page_size, cursor)

    async def list_by_author(
        self, author_id: uuid.UUID, page_size: int, cursor: Optional[Cursor] = None
    ) -> Page:
        stmt = _articles().where(Article.author_id == author_id)
        return await fetch_page(self.db, stmt, Article, page_size, cursor)

    async def list_by_tag(
        self, tag_id: uuid.UUID, page_size: int, cursor: Optional[Cursor] = None
    ) -> Page:
        stmt = _articles().where(Article.tags.any(Tag.id == tag_id))
        return await fetch_page(self.db, stmt, Article, page_size, cursor)

    # ─── Writes ─────────────────────────────────────────

    async def create(
        self,
        author_id: uuid.UUID,
        title: str,
        content: Optional[str] = None,
        tag_ids: Optional[list[uuid.UUID]] = None,
    ) -> Article:
        """Create a draft article. Tag ids that don't exist are skipped."""
        if await self.db.get(User, author_id) is None:
            raise UserNotFoundError(f"User {author_id} not found")

        tags: list[Tag] = []
        if tag_ids:
            result = await self.db.execute(select(Tag).where(Tag.id.in_(tag_ids)))
            tags = list(result.scalars().all())

        now = utcnow()
        article = Article(
            id=uuid.uuid4(),
            author_id=author_id,
            title=title,
            content=content,
            created_at=now,
            updated_at=now,
            status=ArticleStatus.DRAFT.value,
            tags=tags,
        )
        article = await upsert(self.db, article)
        logger.info("article.created", article_id=str(article.id), author_id=str(author_id))
        return article

    async def update(
        self, article_id: uuid.UUID, title: str, content: Optional[str]
    ) -> Article:
        """Replace title and content. Tags and created_at are left alone."""
        article = await self.get(article_id)
        if article is None:
            raise ArticleNotFoundError(f"Article {article_id} not found")

        article.title = title
        article.content = content
        article.updated_at = utcnow()
        return await upsert(self.db, article)

    async def change_status(self, article_id: uuid.UUID, status: str) -> str:
        """Set published/hidden and return the previous status."""
        if status not in SETTABLE_STATUSES:
            raise InvalidStatusError(
                f"Invalid status {status!r}. Allowed: {sorted(SETTABLE_STATUSES)}"
            )

        article = await self.db.get(Article, article_id)
        if article is None:
            raise ArticleNotFoundError(f"Article {article_id} not found")

        previous = article.status
        article.status = status
        await self.db.commit()
        logger.info(
            "article.status_changed",
            article_id=str(article_id),
            previous=previous,
            status=status,
        )
        return previous
