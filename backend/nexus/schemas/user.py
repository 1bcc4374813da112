"""
Pydantic schemas for users.
"""
from datetime import datetime
from typing import Optional
from uuid import UUID

from nexus.core.enums import Role

from .common import CamelModel


class UserSummary(CamelModel):
    """Public subset of a user embedded in requests, messages and events."""
    id: UUID
    name: str
    avatar: Optional[str] = None
    role: Role
    company: Optional[str] = None
    startup: Optional[str] = None


class UserRead(UserSummary):
    """Schema for reading the current user's details."""
    email: str
    bio: Optional[str] = None
    location: Optional[str] = None
    industry: Optional[str] = None
    is_active: bool
    last_login: Optional[datetime] = None
    created_at: datetime
