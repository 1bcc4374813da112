"""
Collaboration request model.
"""
from sqlalchemy import Column, String, Text, ForeignKey, DateTime, Uuid, UniqueConstraint
from sqlalchemy.orm import relationship

from nexus.core.enums import RequestStatus

from ..base import Base, UUIDMixin, TimestampMixin


class CollaborationRequest(Base, UUIDMixin, TimestampMixin):
    """
    A request from one investor to one entrepreneur.

    At most one row exists per (investor_id, entrepreneur_id); the unique
    constraint is what resolves concurrent creates for the same pair.
    """
    __tablename__ = "requests"
    __table_args__ = (
        UniqueConstraint("investor_id", "entrepreneur_id", name="uq_requests_investor_entrepreneur"),
    )

    investor_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    entrepreneur_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(String(20), nullable=False, default=RequestStatus.PENDING.value, index=True)
    message = Column(Text, nullable=False)
    response_message = Column(Text)
    responded_at = Column(DateTime(timezone=True))

    # Relationships
    investor = relationship("User", foreign_keys=[investor_id], back_populates="sent_requests")
    entrepreneur = relationship("User", foreign_keys=[entrepreneur_id], back_populates="received_requests")
