"""
Pydantic schemas for collaboration requests.
"""
from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import Field

from nexus.core.enums import RequestStatus

from .common import CamelModel
from .user import UserSummary


class RequestCreate(CamelModel):
    """Body of POST /api/requests."""
    entrepreneur_id: UUID = Field(..., description="Target entrepreneur")
    message: str = Field(..., description="Pitch to the entrepreneur")


class RequestRespond(CamelModel):
    """Body of PATCH /api/requests/{id}."""
    status: str = Field(..., description="accepted or rejected")
    response_message: Optional[str] = Field(None, description="Optional reply to the investor")


class RequestRead(CamelModel):
    """A collaboration request as returned to either party."""
    id: UUID
    investor_id: UUID
    entrepreneur_id: UUID
    investor: Optional[UserSummary] = None
    entrepreneur: Optional[UserSummary] = None
    status: RequestStatus
    message: str
    response_message: Optional[str] = None
    responded_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


RequestStatusFilter = Optional[Literal["pending", "accepted", "rejected"]]
