"""FastAPI auth dependencies.

Learn: These are used as Depends() in route handlers to extract
and validate the current user identity from the request.

All failures collapse into one 401 with the same body. Whether the
token was forged, expired, or killed by a password change is logged,
never returned.
"""

import uuid
from typing import Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from quill.db.engine import get_db
from quill.services.auth_service import AuthService
from quill.services.errors import AuthError


class CurrentIdentity:
    """The authenticated user making the request."""

    def __init__(self, user_id: str, username: Optional[str] = None):
        self.user_id = user_id
        self.username = username

    @property
    def uuid(self) -> uuid.UUID:
        return uuid.UUID(self.user_id)


def unauthorized() -> HTTPException:
    return HTTPException(
        status_code=401,
        detail="Unauthorized",
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    authorization: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
) -> CurrentIdentity:
    """Extract current identity (required — 401 if missing or rejected)."""
    if not authorization or not authorization.startswith("Bearer "):
        raise unauthorized()

    token = authorization[7:]
    try:
        user = await AuthService(db).validate(token)
    except AuthError:
        raise unauthorized()

    return CurrentIdentity(user_id=str(user.id), username=user.username)
