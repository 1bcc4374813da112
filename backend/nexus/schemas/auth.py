"""
Authentication schemas for email/password registration and login.
"""
from typing import Optional

from pydantic import EmailStr, Field, field_validator

from nexus.core.enums import Role
from nexus.core.validators import validate_password

from .common import CamelModel
from .user import UserRead


class LoginRequest(CamelModel):
    """Request model for email/password login."""
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=1, description="User password")


class RegisterRequest(CamelModel):
    """Request model for email/password registration."""
    name: str = Field(..., min_length=2, max_length=100, description="Display name")
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., description="User password")
    role: Role = Field(..., description="Marketplace side: investor or entrepreneur")
    location: Optional[str] = Field(None, max_length=100, description="Free-form location")

    @field_validator("name", mode="before")
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("password")
    def check_password(cls, v: str) -> str:
        is_valid, error = validate_password(v)
        if not is_valid:
            raise ValueError(error)
        return v


class AuthResult(CamelModel):
    """Token plus the authenticated user."""
    token: str = Field(..., description="Bearer token for HTTP and WebSocket authentication")
    user: UserRead
