"""
Pydantic request / response schemas for the API layer.
Kept separate from ORM models to avoid coupling transport to storage.
"""
from datetime import datetime
from typing import Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, EmailStr, Field, field_validator


# ──────────────────────────── Users ───────────────────────────────────────

class UserCreate(BaseModel):
    username: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=72)


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        # Same canonical form EmailStr gives at registration; anything that
        # is not an address is left alone and simply matches no account.
        try:
            return validate_email(value, check_deliverability=False).normalized
        except EmailNotValidError:
            return value


class Token(BaseModel):
    token: str


class PublicUser(BaseModel):
    """A user as seen from outside: never carries the password hash."""
    id: str
    username: str
    email: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class FollowResult(BaseModel):
    success: bool = True


# ──────────────────────────── Posts ───────────────────────────────────────

class PostCreate(BaseModel):
    text: Optional[str] = None
    media_url: Optional[str] = Field(None, max_length=500)


class PostResponse(BaseModel):
    id: str
    author_id: str
    text: Optional[str]
    media_url: Optional[str]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# ──────────────────────────── Errors ──────────────────────────────────────

class ErrorResponse(BaseModel):
    code: str
    message: str
