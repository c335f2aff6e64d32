"""Auth API — registration, login, refresh, password change.

Learn: Routes for the token lifecycle:
- POST /auth/register → create a user and its credential
- POST /auth/login → username/password → access + refresh token
- POST /auth/refresh → refresh token → new access token
- POST /auth/change-password → rehash, and kill every older token
- GET /auth/me → current user info

Token problems always come back as the same bare 401; the reason is in
the server log under auth.token_rejected.
"""

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.ext.asyncio import AsyncSession

from quill.auth.dependencies import CurrentIdentity, get_current_user, unauthorized
from quill.db.engine import get_db
from quill.schemas.user import (
    AccessTokenResponse,
    ChangePasswordRequest,
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
    UserRead,
)
from quill.services.auth_service import AuthService
from quill.services.errors import AuthError, DuplicateError, InvalidCredentialsError
from quill.services.user_service import UserService

router = APIRouter(prefix="/auth")


def _svc(db: AsyncSession = Depends(get_db)) -> AuthService:
    return AuthService(db)


# ─── Register ────────────────────────────────────────────


@router.post("/register", response_model=UserRead, status_code=201)
async def register(body: RegisterRequest, db: AsyncSession = Depends(get_db)):
    """Create a new user account with its credential."""
    try:
        return await UserService(db).register(
            username=body.username, email=body.email, password=body.password
        )
    except DuplicateError as e:
        raise HTTPException(status_code=409, detail=str(e))


# ─── Login ───────────────────────────────────────────────


@router.post("/login", response_model=TokenResponse)
async def login(body: LoginRequest, svc: AuthService = Depends(_svc)):
    """Login with username and password → JWT tokens."""
    try:
        pair = await svc.login(body.username, body.password)
    except InvalidCredentialsError:
        raise HTTPException(status_code=401, detail="Invalid credentials")

    return TokenResponse(
        access_token=pair.access_token,
        refresh_token=pair.refresh_token,
    )


# ─── Refresh ────────────────────────────────────────────


@router.post("/refresh", response_model=AccessTokenResponse)
async def refresh(body: RefreshRequest, svc: AuthService = Depends(_svc)):
    """Exchange a refresh token for a new access token."""
    try:
        access_token = await svc.refresh(body.refresh_token)
    except AuthError:
        raise unauthorized()
    return AccessTokenResponse(access_token=access_token)


# ─── Password change ────────────────────────────────────


@router.post("/change-password", status_code=204)
async def change_password(
    body: ChangePasswordRequest,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: AuthService = Depends(_svc),
):
    """Change the caller's password. Every token issued so far stops working."""
    try:
        await svc.change_password(identity.uuid, body.old_password, body.new_password)
    except InvalidCredentialsError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return Response(status_code=204)


# ─── Current user ───────────────────────────────────────


@router.get("/me", response_model=UserRead)
async def get_me(identity: CurrentIdentity = Depends(get_current_user)):
    """Get the current authenticated user's info."""
    return UserRead(id=identity.uuid, username=identity.username)
