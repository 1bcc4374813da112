"""
Domain errors shared by the HTTP and real-time layers.

Every error carries the HTTP status it maps to; the exception handlers in
nexus.api.errors turn them into the uniform response envelope.
"""
from typing import Any, Dict, Optional

from starlette import status


class AppError(Exception):
    """Base application error with structured information"""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(AppError):
    """Malformed or out-of-bound input."""
    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"field": field} if field else None,
        )


class AuthenticationError(AppError):
    """Missing, invalid or expired credentials."""
    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message=message, status_code=status.HTTP_401_UNAUTHORIZED)


class AuthorizationError(AppError):
    """Authenticated, but the role does not allow the operation."""
    def __init__(self, message: str = "Access denied"):
        super().__init__(message=message, status_code=status.HTTP_403_FORBIDDEN)


class NotFoundError(AppError):
    """
    Missing record, a record the caller is not party to, or a record that is not
    in the state the attempted transition requires.
    """
    def __init__(self, message: str = "Not found"):
        super().__init__(message=message, status_code=status.HTTP_404_NOT_FOUND)


class ConflictError(AppError):
    """A record for the same unique key already exists."""
    def __init__(self, message: str):
        super().__init__(message=message, status_code=status.HTTP_409_CONFLICT)
