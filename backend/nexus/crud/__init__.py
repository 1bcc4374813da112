"""
CRUD operations for the application.
"""
from nexus.crud import user
from nexus.crud import request
from nexus.crud import message

__all__ = ["user", "request", "message"]
