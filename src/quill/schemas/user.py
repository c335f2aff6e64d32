"""Pydantic schemas for users, credentials, and auth flows."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


# ─── Users ──────────────────────────────────────────────

class UserWrite(BaseModel):
    username: str = Field(..., min_length=1, max_length=50)


class UserRead(BaseModel):
    id: uuid.UUID
    username: str

    model_config = {"from_attributes": True}


# ─── Credentials ────────────────────────────────────────

class CredentialCreate(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=8)


class CredentialUpdate(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    password: Optional[str] = Field(
        None, min_length=8, description="New password; omit to keep the current one"
    )


class CredentialRead(BaseModel):
    """Credential without the hash."""
    user_id: uuid.UUID
    email: str
    created_at: Optional[datetime] = None
    last_changed_at: Optional[datetime] = None
    email_confirmed: bool

    model_config = {"from_attributes": True}


# ─── Auth ───────────────────────────────────────────────

class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=50)
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=8)


class LoginRequest(BaseModel):
    username: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class RefreshRequest(BaseModel):
    refresh_token: str


class AccessTokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class ChangePasswordRequest(BaseModel):
    old_password: str
    new_password: str = Field(..., min_length=8)
