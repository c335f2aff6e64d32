"""Pydantic schemas for articles and tags.

Learn: Pydantic v2 models validate request/response data. Separate
"Create" schemas (input) from "Read" schemas (output) for clean APIs.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from quill.db.models import ArticleStatus


# ─── Articles ───────────────────────────────────────────

class ArticleCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    content: Optional[str] = None
    author_id: Optional[uuid.UUID] = Field(
        None, description="Defaults to the authenticated user"
    )
    tag_ids: list[uuid.UUID] = Field(default_factory=list)


class ArticleUpdate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    content: Optional[str] = None


class ArticleStatusChange(BaseModel):
    status: ArticleStatus


class ArticleStatusChanged(BaseModel):
    previous_status: ArticleStatus
    status: ArticleStatus


class ArticleRead(BaseModel):
    id: uuid.UUID
    author_id: uuid.UUID
    title: str
    content: Optional[str] = None
    status: ArticleStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    tag_ids: list[uuid.UUID] = []

    model_config = {"from_attributes": True}


# ─── Tags ───────────────────────────────────────────────

class TagCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)


class TagRead(BaseModel):
    id: uuid.UUID
    name: str
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
