"""JWT token creation and verification.

Learn: JWT (JSON Web Token) provides stateless authentication.
- Access token: short-lived (30min), sent on every API call
- Refresh token: long-lived (7 days), exchanged for new access tokens

Both carry the same claims (sub, name, jti, iat) and differ only in exp.
Nothing is stored server-side: a token's validity is recomputed on each
request from its signature, its expiry, and the subject's credential
(see AuthService.validate for the password-change check).

iat keeps its sub-second fraction. A whole-second iat would make a token
minted right after a password change look older than the change.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from quill.config import settings

# Pinned: verification accepts exactly this algorithm, so a token whose
# header claims "none", RS256, HS512, ... fails signature checking.
ALGORITHM = "HS256"
REQUIRED_CLAIMS = ["sub", "iat", "exp"]


class TokenError(Exception):
    """Raised when token verification fails."""


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


def create_token(
    user_id: uuid.UUID | str,
    username: str,
    issued_at: datetime,
    expires_delta: timedelta,
) -> str:
    """Create one signed token. A fresh jti is drawn per call."""
    payload = {
        "sub": str(user_id),
        "name": username,
        "jti": uuid.uuid4().hex,
        "iat": issued_at.timestamp(),
        "exp": issued_at + expires_delta,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=ALGORITHM)


def issue_tokens(
    user_id: uuid.UUID | str,
    username: str,
    issued_at: Optional[datetime] = None,
) -> TokenPair:
    """Mint an access + refresh token pair sharing one issued-at instant."""
    issued_at = issued_at or datetime.now(timezone.utc)
    return TokenPair(
        access_token=create_access_token(user_id, username, issued_at),
        refresh_token=create_token(
            user_id,
            username,
            issued_at,
            timedelta(days=settings.refresh_token_expire_days),
        ),
    )


def create_access_token(
    user_id: uuid.UUID | str,
    username: str,
    issued_at: Optional[datetime] = None,
) -> str:
    """Create a JWT access token."""
    return create_token(
        user_id,
        username,
        issued_at or datetime.now(timezone.utc),
        timedelta(minutes=settings.access_token_expire_minutes),
    )


def decode_token(token: str, verify_exp: bool = True) -> dict:
    """Verify signature (and expiry unless relaxed) and return the claims.

    verify_exp=False is the relaxed mode used only when exchanging a
    refresh token. Signature and required claims are still enforced.
    Raises TokenError on failure.
    """
    try:
        return jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[ALGORITHM],
            options={"verify_exp": verify_exp, "require": REQUIRED_CLAIMS},
        )
    except jwt.ExpiredSignatureError:
        raise TokenError("Token has expired")
    except jwt.InvalidTokenError as e:
        raise TokenError(f"Invalid token: {e}")


def token_issued_at(payload: dict) -> datetime:
    """The token's iat claim as an aware UTC datetime."""
    try:
        return datetime.fromtimestamp(float(payload["iat"]), tz=timezone.utc)
    except (KeyError, TypeError, ValueError, OverflowError, OSError):
        raise TokenError("Invalid token: bad iat claim")
