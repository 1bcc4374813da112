"""
Pydantic schemas for the application.
"""
from nexus.schemas import common
from nexus.schemas import user
from nexus.schemas import auth
from nexus.schemas import request
from nexus.schemas import message

__all__ = ["common", "user", "auth", "request", "message"]
