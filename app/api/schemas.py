"""Pydantic request/response schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


# ── Auth ───────────────────────────────────────────


class RegisterRequest(BaseModel):
    user_name: str = Field(min_length=1, max_length=256)
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class UserResponse(BaseModel):
    id: UUID
    user_name: str
    email: str
    email_confirmed: bool
    roles: list[str]
    created_at: datetime | None = None


class RoleResponse(BaseModel):
    id: UUID
    name: str


class OTPVerifyRequest(BaseModel):
    code: str = Field(min_length=4, max_length=10)


class OTPSentResponse(BaseModel):
    detail: str = "A one-time code has been sent"


# ── Media ──────────────────────────────────────────


class StoredFileResponse(BaseModel):
    key: str
    url: str
    content_type: str | None = None
    size: int


# ── System ─────────────────────────────────────────


class HealthResponse(BaseModel):
    status: str
    service: str
    environment: str
