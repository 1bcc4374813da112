"""
Pydantic schemas for durable chat messages.
"""
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from nexus.core.enums import MessageKind

from .common import CamelModel
from .user import UserSummary


class MessageCreate(CamelModel):
    """Body of POST /api/chat/messages."""
    receiver_id: UUID = Field(..., description="Recipient user id")
    content: str = Field(..., description="Message text")


class MessageRead(CamelModel):
    """A persisted message."""
    id: UUID
    sender_id: UUID
    receiver_id: UUID
    sender: Optional[UserSummary] = None
    receiver: Optional[UserSummary] = None
    content: str
    read: bool
    read_at: Optional[datetime] = None
    message_type: MessageKind
    created_at: datetime


class Conversation(CamelModel):
    """Latest message and unread count for one counterpart."""
    other_user: UserSummary
    last_message: MessageRead
    unread_count: int


class UnreadCount(CamelModel):
    unread_count: int


class ModifiedCount(CamelModel):
    modified_count: int
