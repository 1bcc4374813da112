"""
Import all models to ensure they are registered with SQLAlchemy.
"""
from ..base import Base
from .user import User
from .request import CollaborationRequest
from .message import Message
