"""Credential service — the single source of truth for session invalidation.

Learn: One UserCredential row per user holds the password hash and
last_changed_at. Token validation reads last_changed_at through get();
every password change goes through set_password(), which writes the new
hash and the bumped watermark in the same commit, so no reader can see
a new hash next to a stale timestamp.
"""

import uuid
from datetime import datetime
from typing import Optional

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from quill.auth.password import hash_password
from quill.db.models import User, UserCredential, utcnow
from quill.db.upsert import upsert
from quill.services.errors import (
    CredentialNotFoundError,
    DuplicateError,
    UserNotFoundError,
)

logger = structlog.get_logger()


def next_watermark(previous: Optional[datetime]) -> datetime:
    """now, but never earlier than the previous watermark."""
    now = utcnow()
    if previous is not None and previous > now:
        return previous
    return now


def set_password(credential: UserCredential, password: str) -> None:
    """Rehash and bump last_changed_at together (caller commits)."""
    credential.password_hash = hash_password(password)
    credential.last_changed_at = next_watermark(credential.last_changed_at)


class CredentialService:
    """Read/write access to UserCredential rows."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, user_id: uuid.UUID) -> UserCredential | None:
        return await self.db.get(UserCredential, user_id)

    async def upsert(self, credential: UserCredential) -> UserCredential:
        """Insert, or overwrite the existing row for credential.user_id in place."""
        email = credential.email
        try:
            return await upsert(self.db, credential)
        except IntegrityError as e:
            await self.db.rollback()
            raise DuplicateError(f"Email {email} already in use") from e

    async def create(
        self, user_id: uuid.UUID, email: str, password: str
    ) -> UserCredential:
        """Create (or replace) the credential for an existing user."""
        if await self.db.get(User, user_id) is None:
            raise UserNotFoundError(f"User {user_id} not found")

        existing = await self.get(user_id)
        watermark = next_watermark(existing.last_changed_at if existing else None)
        credential = UserCredential(
            user_id=user_id,
            email=email,
            password_hash=hash_password(password),
            created_at=utcnow(),
            last_changed_at=watermark,
            email_confirmed=False,
        )
        credential = await self.upsert(credential)
        logger.info("credential.saved", user_id=str(user_id))
        return credential

    async def update(
        self, user_id: uuid.UUID, email: str, password: Optional[str] = None
    ) -> UserCredential:
        """Change the email and, if given, the password.

        A password change here invalidates every token issued before it,
        exactly like the self-service change-password flow.
        """
        credential = await self.get(user_id)
        if credential is None:
            raise CredentialNotFoundError(f"Credential for user {user_id} not found")

        credential.email = email
        if password:
            set_password(credential, password)
        credential = await self.upsert(credential)

        if password:
            logger.info("auth.password_changed", user_id=str(user_id), via="credential_update")
        return credential
