"""
User model for authentication and marketplace profiles.
"""
from sqlalchemy import Column, String, DateTime, Boolean, Text
from sqlalchemy.orm import relationship

from ..base import Base, UUIDMixin, TimestampMixin

DEFAULT_AVATAR_URL = (
    "https://images.pexels.com/photos/220453/pexels-photo-220453.jpeg"
    "?auto=compress&cs=tinysrgb&w=150&h=150&dpr=2"
)


class User(Base, UUIDMixin, TimestampMixin):
    """
    A marketplace participant: either an investor or an entrepreneur.
    """
    __tablename__ = "users"

    # Authentication fields
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, index=True)

    # Public profile
    avatar = Column(String(512), default=DEFAULT_AVATAR_URL)
    bio = Column(Text)
    location = Column(String(100))

    # Entrepreneur specific fields
    startup = Column(String(100))
    industry = Column(String(50), index=True)

    # Investor specific fields
    company = Column(String(100))

    # Status info
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    last_login = Column(DateTime(timezone=True))

    # Relationships
    sent_requests = relationship(
        "CollaborationRequest",
        foreign_keys="CollaborationRequest.investor_id",
        back_populates="investor",
        cascade="all, delete-orphan",
    )
    received_requests = relationship(
        "CollaborationRequest",
        foreign_keys="CollaborationRequest.entrepreneur_id",
        back_populates="entrepreneur",
        cascade="all, delete-orphan",
    )
