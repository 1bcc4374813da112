"""
Authentication dependencies for FastAPI.
"""
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import logging

from nexus.auth.identity import get_user_for_token
from nexus.core.enums import Role
from nexus.db.session import get_db
from nexus.db.models.user import User

# Configure logging
logger = logging.getLogger(__name__)

# OAuth2 scheme for token authentication
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl="api/auth/login",
    # Missing tokens are reported by get_current_user in the envelope format
    auto_error=False
)


async def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db)
) -> User:
    """
    Validate the access token and return the current user.

    Args:
        token: The JWT access token
        db: Database session

    Returns:
        User: The current authenticated user

    Raises:
        HTTPException: If authentication fails or the account is deactivated
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    # If no token is provided, raise exception
    if not token:
        raise credentials_exception

    user = await get_user_for_token(db, token)
    if user is None:
        raise credentials_exception

    if not user.is_active:
        logger.info(f"[AUTH] Rejected token for inactive user {user.id}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account is deactivated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user


def require_role(*roles: Role):
    """
    Build a dependency that only lets users with one of `roles` through.

    Usage:
        current_user: User = Depends(require_role(Role.INVESTOR))
    """
    allowed = {Role(role) for role in roles}

    async def check_role(current_user: User = Depends(get_current_user)) -> User:
        if Role(current_user.role) not in allowed:
            logger.info(f"[AUTH] User {current_user.id} ({current_user.role}) denied, requires {sorted(r.value for r in allowed)}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Required role: {' or '.join(sorted(r.value for r in allowed))}"
            )
        return current_user

    return check_role
