"""Tag API routes, including the articles-by-tag listing."""

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from quill.api.params import PageParams, page_params
from quill.auth.dependencies import CurrentIdentity, get_current_user
from quill.db.engine import get_db
from quill.schemas.article import ArticleRead, TagCreate, TagRead
from quill.schemas.common import PageResponse, page_response
from quill.services.article_service import ArticleService
from quill.services.errors import DuplicateError, TagNotFoundError
from quill.services.tag_service import TagService

router = APIRouter()


def _svc(db: AsyncSession = Depends(get_db)) -> TagService:
    return TagService(db)


@router.get("/tags", response_model=PageResponse[TagRead])
async def list_tags(
    page: PageParams = Depends(page_params),
    svc: TagService = Depends(_svc),
):
    return page_response(await svc.list_all(page.limit, page.cursor))


@router.get("/tags/{tag_id}", response_model=TagRead)
async def get_tag(tag_id: uuid.UUID, svc: TagService = Depends(_svc)):
    tag = await svc.get(tag_id)
    if not tag:
        raise HTTPException(status_code=404, detail="Tag not found")
    return tag


@router.post("/tags", response_model=TagRead, status_code=201)
async def create_tag(
    body: TagCreate,
    _: CurrentIdentity = Depends(get_current_user),
    svc: TagService = Depends(_svc),
):
    try:
        return await svc.create(body.name)
    except DuplicateError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.put("/tags/{tag_id}", response_model=TagRead)
async def rename_tag(
    tag_id: uuid.UUID,
    body: TagCreate,
    _: CurrentIdentity = Depends(get_current_user),
    svc: TagService = Depends(_svc),
):
    try:
        return await svc.rename(tag_id, body.name)
    except TagNotFoundError:
        raise HTTPException(status_code=404, detail="Tag not found")
    except DuplicateError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.get("/tags/{tag_id}/articles", response_model=PageResponse[ArticleRead])
async def list_tag_articles(
    tag_id: uuid.UUID,
    page: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
):
    """Articles carrying this tag, newest first, keyset-paginated."""
    svc = ArticleService(db)
    return page_response(await svc.list_by_tag(tag_id, page.limit, page.cursor))
