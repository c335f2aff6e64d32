"""Article API routes.

Learn: Reads are open; writes take `Depends(get_current_user)` and so
need a Bearer token. Routes handle HTTP concerns, ArticleService
handles the rest, and domain errors become status codes here.
"""

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from quill.api.params import PageParams, page_params
from quill.auth.dependencies import CurrentIdentity, get_current_user
from quill.db.engine import get_db
from quill.schemas.article import (
    ArticleCreate,
    ArticleRead,
    ArticleStatusChange,
    ArticleStatusChanged,
    ArticleUpdate,
)
from quill.schemas.common import PageResponse, page_response
from quill.services.article_service import ArticleService
from quill.services.errors import (
    ArticleNotFoundError,
    InvalidStatusError,
    UserNotFoundError,
)

router = APIRouter()


def _svc(db: AsyncSession = Depends(get_db)) -> ArticleService:
    return ArticleService(db)


@router.get("/articles", response_model=PageResponse[ArticleRead])
async def list_articles(
    page: PageParams = Depends(page_params),
    svc: ArticleService = Depends(_svc),
):
    """All articles, newest first, keyset-paginated."""
    return page_response(await svc.list_all(page.limit, page.cursor))


@router.get("/articles/{article_id}", response_model=ArticleRead)
async def get_article(article_id: uuid.UUID, svc: ArticleService = Depends(_svc)):
    article = await svc.get(article_id)
    if not article:
        raise HTTPException(status_code=404, detail="Article not found")
    return article


@router.post("/articles", response_model=ArticleRead, status_code=201)
async def create_article(
    body: ArticleCreate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: ArticleService = Depends(_svc),
):
    """Create a draft. Unknown tag ids are ignored."""
    try:
        return await svc.create(
            author_id=body.author_id or identity.uuid,
            title=body.title,
            content=body.content,
            tag_ids=body.tag_ids,
        )
    except UserNotFoundError:
        raise HTTPException(status_code=404, detail="Author not found")


@router.put("/articles/{article_id}", response_model=ArticleRead)
async def update_article(
    article_id: uuid.UUID,
    body: ArticleUpdate,
    _: CurrentIdentity = Depends(get_current_user),
    svc: ArticleService = Depends(_svc),
):
    """Replace title and content. Tags are not touched."""
    try:
        return await svc.update(article_id, title=body.title, content=body.content)
    except ArticleNotFoundError:
        raise HTTPException(status_code=404, detail="Article not found")


@router.patch("/articles/{article_id}/status", response_model=ArticleStatusChanged)
async def change_article_status(
    article_id: uuid.UUID,
    body: ArticleStatusChange,
    _: CurrentIdentity = Depends(get_current_user),
    svc: ArticleService = Depends(_svc),
):
    """Publish or hide an article. Returns the status it had before."""
    try:
        previous = await svc.change_status(article_id, body.status.value)
    except InvalidStatusError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ArticleNotFoundError:
        raise HTTPException(status_code=404, detail="Article not found")
    return {"previous_status": previous, "status": body.status}
