"""User and credential API routes.

Learn: POST /users/{id} is an upsert with a caller-chosen id. The
credential sub-resource never exposes password_hash; a password change
through PUT /users/{id}/credential logs the user out everywhere, the
same as /auth/change-password.
"""

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from quill.api.params import PageParams, page_params
from quill.auth.dependencies import CurrentIdentity, get_current_user
from quill.db.engine import get_db
from quill.schemas.article import ArticleRead
from quill.schemas.common import PageResponse, page_response
from quill.schemas.user import (
    CredentialCreate,
    CredentialRead,
    CredentialUpdate,
    UserRead,
    UserWrite,
)
from quill.services.article_service import ArticleService
from quill.services.credential_service import CredentialService
from quill.services.errors import (
    CredentialNotFoundError,
    DuplicateError,
    UserNotFoundError,
)
from quill.services.user_service import UserService

router = APIRouter()


def _svc(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db)


def _credentials(db: AsyncSession = Depends(get_db)) -> CredentialService:
    return CredentialService(db)


# ─── Users ──────────────────────────────────────────────


@router.get("/users/{user_id}", response_model=UserRead)
async def get_user(user_id: uuid.UUID, svc: UserService = Depends(_svc)):
    user = await svc.get(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.post("/users/{user_id}", response_model=UserRead)
async def put_user(
    user_id: uuid.UUID,
    body: UserWrite,
    _: CurrentIdentity = Depends(get_current_user),
    svc: UserService = Depends(_svc),
):
    """Create the user with this id, or overwrite its username."""
    try:
        return await svc.put_user(user_id, body.username)
    except DuplicateError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.put("/users/{user_id}", response_model=UserRead)
async def rename_user(
    user_id: uuid.UUID,
    body: UserWrite,
    _: CurrentIdentity = Depends(get_current_user),
    svc: UserService = Depends(_svc),
):
    try:
        return await svc.rename(user_id, body.username)
    except UserNotFoundError:
        raise HTTPException(status_code=404, detail="User not found")
    except DuplicateError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.get("/users/{user_id}/articles", response_model=PageResponse[ArticleRead])
async def list_user_articles(
    user_id: uuid.UUID,
    page: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
):
    """Articles by this author, newest first, keyset-paginated."""
    svc = ArticleService(db)
    return page_response(await svc.list_by_author(user_id, page.limit, page.cursor))


# ─── Credential ─────────────────────────────────────────


@router.get("/users/{user_id}/credential", response_model=CredentialRead)
async def get_credential(
    user_id: uuid.UUID,
    _: CurrentIdentity = Depends(get_current_user),
    svc: CredentialService = Depends(_credentials),
):
    credential = await svc.get(user_id)
    if not credential:
        raise HTTPException(status_code=404, detail="Credential not found")
    return credential


@router.post("/users/{user_id}/credential", response_model=CredentialRead, status_code=201)
async def create_credential(
    user_id: uuid.UUID,
    body: CredentialCreate,
    _: CurrentIdentity = Depends(get_current_user),
    svc: CredentialService = Depends(_credentials),
):
    try:
        return await svc.create(user_id, email=body.email, password=body.password)
    except UserNotFoundError:
        raise HTTPException(status_code=404, detail="User not found")
    except DuplicateError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.put("/users/{user_id}/credential", response_model=CredentialRead)
async def update_credential(
    user_id: uuid.UUID,
    body: CredentialUpdate,
    _: CurrentIdentity = Depends(get_current_user),
    svc: CredentialService = Depends(_credentials),
):
    try:
        return await svc.update(user_id, email=body.email, password=body.password)
    except CredentialNotFoundError:
        raise HTTPException(status_code=404, detail="Credential not found")
    except DuplicateError as e:
        raise HTTPException(status_code=409, detail=str(e))
