"""Pydantic schemas for authentication endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field
from rosterhub.core.auth import AccountKind

# --- Request Schemas ---


class RegisterRequest(BaseModel):
    """Request schema for account registration."""

    kind: AccountKind = Field(..., description="organization or volunteer")
    name: str = Field(..., min_length=1, max_length=255, description="Display name")
    email: EmailStr = Field(..., description="Account email address")
    password: str = Field(
        ...,
        min_length=8,
        max_length=72,
        description="Password (8 to 72 characters)",
    )
    description: str | None = Field(None, description="Organization description")
    interests: list[str] = Field(default_factory=list, description="Volunteer interest tags")


class LoginRequest(BaseModel):
    """Request schema for login."""

    kind: AccountKind = Field(..., description="organization or volunteer")
    email: EmailStr = Field(..., description="Account email address")
    password: str = Field(..., description="Account password")


# --- Response Schemas ---


class TokenResponse(BaseModel):
    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: int = Field(..., description="Access token TTL in seconds")


class AccountResponse(BaseModel):
    """Public account data; credential hashes are never part of it."""

    id: str
    kind: AccountKind
    name: str
    email: str
    description: str | None = None
    interests: list[str] | None = None
    created_at: datetime | None = None


class AuthResponse(BaseModel):
    message: str
    account: AccountResponse
    token: TokenResponse


class MeResponse(BaseModel):
    account: AccountResponse
