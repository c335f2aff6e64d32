"""User service — authors, registration, and their article listings."""

import uuid
from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from quill.auth.password import hash_password
from quill.db.models import User, UserCredential, utcnow
from quill.db.upsert import upsert
from quill.services.errors import DuplicateError, UserNotFoundError

logger = structlog.get_logger()


class UserService:
    """Business logic for users."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, user_id: uuid.UUID) -> User | None:
        return await self.db.get(User, user_id)

    async def get_by_username(self, username: str) -> User | None:
        result = await self.db.execute(select(User).where(User.username == username))
        return result.scalars().first()

    async def save(self, user: User) -> User:
        username = user.username
        try:
            return await upsert(self.db, user)
        except IntegrityError as e:
            await self.db.rollback()
            raise DuplicateError(f"Username {username} already taken") from e

    async def put_user(self, user_id: uuid.UUID, username: str) -> User:
        """Create the user with this id, or rename it if it already exists."""
        return await self.save(User(id=user_id, username=username))

    async def rename(self, user_id: uuid.UUID, username: str) -> User:
        user = await self.get(user_id)
        if user is None:
            raise UserNotFoundError(f"User {user_id} not found")
        user.username = username
        return await self.save(user)

    async def register(
        self,
        username: str,
        email: str,
        password: str,
        user_id: Optional[uuid.UUID] = None,
    ) -> User:
        """Create a user and its credential in one transaction.

        Learn: The credential is born with last_changed_at = created_at,
        so tokens can only ever be issued after the watermark exists.
        """
        now = utcnow()
        user = User(id=user_id or uuid.uuid4(), username=username)
        user.credential = UserCredential(
            email=email,
            password_hash=hash_password(password),
            created_at=now,
            last_changed_at=now,
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise DuplicateError("Username or email already registered") from e

        logger.info("auth.registered", user_id=str(user.id), username=username)
        return user
