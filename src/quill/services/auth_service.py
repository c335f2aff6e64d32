"""Auth service — login, refresh, password change, and token validation.

Learn: Validation is a short pipeline; any step can reject:

    Presented → signature checked → expiry checked → invalidation checked → accepted

The invalidation step is what makes sessions revocable without a
blacklist. Each credential carries last_changed_at, and any token whose
iat is strictly older than it is dead:

    change password at T  ⇒  every token with iat < T is rejected, forever

Storage cost is one timestamp per user. The price is precision: you can
end all of a user's sessions, never just one.

Every rejection surfaces as the same AuthError to the HTTP layer; the
specific reason only goes to the log.
"""

import uuid
from datetime import datetime

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from quill.auth.jwt import (
    TokenError,
    TokenPair,
    create_access_token,
    decode_token,
    issue_tokens,
    token_issued_at,
)
from quill.auth.password import burn_verify, verify_password
from quill.db.models import User, UserCredential
from quill.services.credential_service import CredentialService, set_password
from quill.services.errors import AuthError, InvalidCredentialsError
from quill.services.user_service import UserService

logger = structlog.get_logger()


def is_stale(credential: UserCredential, issued_at: datetime) -> bool:
    """True if the token was issued before the last password change."""
    if credential.last_changed_at is None:
        return False
    return credential.last_changed_at > issued_at


class AuthService:
    """Service for authentication operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.users = UserService(db)
        self.credentials = CredentialService(db)

    async def login(self, username: str, password: str) -> TokenPair:
        """Check a username/password pair and mint a token pair.

        Raises InvalidCredentialsError for unknown user, missing credential
        and wrong password alike, to prevent user enumeration.
        """
        user = await self.users.get_by_username(username)
        credential = await self.credentials.get(user.id) if user else None

        if user is None or credential is None:
            burn_verify(password)
            logger.info("auth.login_failed", username=username, reason="unknown_user")
            raise InvalidCredentialsError("Invalid credentials")

        if not verify_password(password, credential.password_hash):
            logger.info("auth.login_failed", username=username, reason="bad_password")
            raise InvalidCredentialsError("Invalid credentials")

        logger.info("auth.login", user_id=str(user.id))
        return issue_tokens(user.id, user.username)

    async def validate(self, token: str, allow_expired: bool = False) -> User:
        """Run the full validation pipeline and return the token's user.

        allow_expired=True skips only the expiry check; it exists for
        refresh-token exchange and must not be used for request auth.
        """
        try:
            payload = decode_token(token, verify_exp=not allow_expired)
            user_id = uuid.UUID(str(payload["sub"]))
            issued_at = token_issued_at(payload)
        except (TokenError, ValueError) as e:
            logger.info("auth.token_rejected", reason="invalid", error=str(e))
            raise AuthError("Unauthorized") from e

        credential = await self.credentials.get(user_id)
        if credential is None:
            logger.info("auth.token_rejected", reason="orphaned", user_id=str(user_id))
            raise AuthError("Unauthorized")

        if is_stale(credential, issued_at):
            logger.info("auth.token_rejected", reason="stale", user_id=str(user_id))
            raise AuthError("Unauthorized")

        user = await self.users.get(user_id)
        if user is None:
            logger.info("auth.token_rejected", reason="orphaned", user_id=str(user_id))
            raise AuthError("Unauthorized")
        return user

    async def refresh(self, refresh_token: str) -> str:
        """Exchange a refresh token for a new access token.

        The refresh token itself is not rotated; it stays usable until a
        password change invalidates it.
        """
        user = await self.validate(refresh_token, allow_expired=True)
        logger.info("auth.refreshed", user_id=str(user.id))
        return create_access_token(user.id, user.username)

    async def change_password(
        self, user_id: uuid.UUID, old_password: str, new_password: str
    ) -> None:
        """Change a password, invalidating every token issued before now."""
        credential = await self.credentials.get(user_id)
        if credential is None or not verify_password(old_password, credential.password_hash):
            raise InvalidCredentialsError("Current password is incorrect")

        set_password(credential, new_password)
        await self.credentials.upsert(credential)
        logger.info("auth.password_changed", user_id=str(user_id))
