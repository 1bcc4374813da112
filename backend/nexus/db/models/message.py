"""
Durable chat message model.
"""
from sqlalchemy import Column, String, Text, ForeignKey, DateTime, Boolean, Uuid, Index
from sqlalchemy.orm import relationship

from nexus.core.enums import MessageKind

from ..base import Base, UUIDMixin, TimestampMixin


class Message(Base, UUIDMixin, TimestampMixin):
    """
    A direct message persisted through the REST path.
    The real-time relay never writes these rows.
    """
    __tablename__ = "messages"
    __table_args__ = (
        Index("ix_messages_sender_receiver", "sender_id", "receiver_id"),
    )

    sender_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    receiver_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    read = Column(Boolean, default=False, nullable=False, index=True)
    read_at = Column(DateTime(timezone=True))
    message_type = Column(String(20), nullable=False, default=MessageKind.TEXT.value)

    # Relationships
    sender = relationship("User", foreign_keys=[sender_id])
    receiver = relationship("User", foreign_keys=[receiver_id])
