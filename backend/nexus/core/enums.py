"""
Closed value sets shared across layers.
"""
from enum import Enum


class Role(str, Enum):
    """Marketplace side a participant belongs to."""
    INVESTOR = "investor"
    ENTREPRENEUR = "entrepreneur"


class RequestStatus(str, Enum):
    """Collaboration request lifecycle. PENDING is the only non-terminal state."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self is not RequestStatus.PENDING


class MessageKind(str, Enum):
    """Content type of a persisted chat message."""
    TEXT = "text"
    IMAGE = "image"
    FILE = "file"
