"""SQLAlchemy ORM models — single source of truth for the database schema.

Learn: Declarative ORM mapping with SQLAlchemy 2.0 style (Mapped[] + mapped_column).
Each class = one table. Alembic migrations are written against these models.

Key concepts:
- UUID primary keys. The generic Uuid type maps to native uuid on
  PostgreSQL and 32-char hex on SQLite; both sort like the 128-bit value,
  which keyset pagination relies on for its tiebreak.
- Timestamps are Python-side defaults (not server_default) so every
  backend stores the same microsecond-precision UTC value.
- created_at is nullable on listable entities; pagination treats NULL
  as the minimum timestamp.
"""

import enum
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    String,
    Table,
    Text,
    TypeDecorator,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_uuid() -> uuid.UUID:
    return uuid.uuid4()


class UTCDateTime(TypeDecorator):
    """Timezone-aware UTC datetime on every backend.

    Learn: PostgreSQL's timestamptz round-trips tzinfo, SQLite does not.
    Binding normalises to UTC; loading reattaches UTC to naive values, so
    Python-side comparisons never mix naive and aware datetimes.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


# Smallest timestamp any backend accepts; NULL created_at sorts as this.
MIN_TIMESTAMP = datetime(1, 1, 1, tzinfo=timezone.utc)


class ArticleStatus(str, enum.Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    HIDDEN = "hidden"


# ══════════════════════════════════════════════════════════════
# Users and credentials
# ══════════════════════════════════════════════════════════════


class User(Base):
    """A blog author.

    Learn: The id is caller-assignable (POST /users/{id}) so external
    identity systems can keep their own identifiers.
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)

    # Relationships
    credential: Mapped[Optional["UserCredential"]] = relationship(
        back_populates="user", uselist=False
    )
    articles: Mapped[list["Article"]] = relationship(back_populates="author")


class UserCredential(Base):
    """Password hash and the invalidate-before watermark for one user.

    Learn: last_changed_at is the whole session-invalidation mechanism.
    Any token whose iat is older than it is rejected, so bumping this one
    column logs the user out everywhere. It only ever moves forward and
    is written in the same commit as password_hash.
    """

    __tablename__ = "user_credentials"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), primary_key=True
    )
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)
    last_changed_at: Mapped[Optional[datetime]] = mapped_column(
        UTCDateTime, nullable=True
    )
    email_confirmed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    user: Mapped["User"] = relationship(back_populates="credential")


# ══════════════════════════════════════════════════════════════
# Content
# ══════════════════════════════════════════════════════════════


article_tags = Table(
    "article_tags",
    Base.metadata,
    Column("article_id", Uuid, ForeignKey("articles.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Uuid, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)


class Tag(Base):
    __tablename__ = "tags"
    __table_args__ = (
        Index("idx_tags_created_at_id", "created_at", "id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    name: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    created_at: Mapped[Optional[datetime]] = mapped_column(
        UTCDateTime, nullable=True, default=utcnow
    )

    articles: Mapped[list["Article"]] = relationship(
        secondary=article_tags, back_populates="tags"
    )


class Article(Base):
    """A blog post.

    Learn: (created_at, id) is the keyset. created_at is set once at
    creation and never rewritten by the update flows, so cursors that
    captured it stay meaningful.
    """

    __tablename__ = "articles"
    __table_args__ = (
        Index("idx_articles_author_id", "author_id"),
        Index("idx_articles_created_at_id", "created_at", "id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    author_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[Optional[datetime]] = mapped_column(
        UTCDateTime, nullable=True, default=utcnow
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ArticleStatus.DRAFT.value
    )

    # Relationships
    author: Mapped["User"] = relationship(back_populates="articles")
    tags: Mapped[list["Tag"]] = relationship(
        secondary=article_tags, back_populates="articles"
    )

    @property
    def tag_ids(self) -> list[uuid.UUID]:
        return [t.id for t in self.tags]
