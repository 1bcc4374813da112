"""
CRUD operations for users.
"""
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from nexus.core.enums import Role
from nexus.db.models.user import User


async def create_user(
    db: AsyncSession,
    *,
    name: str,
    email: str,
    password_hash: str,
    role: Role,
    location: Optional[str] = None,
) -> User:
    """
    Create a new user.

    Args:
        db: Database session
        name: Display name
        email: Normalised (lowercased) email
        password_hash: Hash produced by core.security
        role: Marketplace side
        location: Optional location

    Returns:
        User: Created user
    """
    db_user = User(
        name=name,
        email=email,
        password_hash=password_hash,
        role=Role(role).value,
        location=location,
        is_active=True,
    )
    db.add(db_user)
    await db.flush()
    await db.refresh(db_user)
    return db_user


async def get_user(db: AsyncSession, user_id: UUID) -> Optional[User]:
    """
    Get a user by ID.

    Returns:
        Optional[User]: User if found, None otherwise
    """
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_by_email(db: AsyncSession, email: str) -> Optional[User]:
    """
    Get a user by email (case-insensitive, emails are stored lowercased).
    """
    result = await db.execute(select(User).where(User.email == email.lower().strip()))
    return result.scalar_one_or_none()


async def get_active_by_role(db: AsyncSession, user_id: UUID, role: Role) -> Optional[User]:
    """
    Get an active user holding the given role.

    Returns:
        Optional[User]: User if it exists, is active and has the role; None otherwise
    """
    result = await db.execute(
        select(User).where(
            User.id == user_id,
            User.role == Role(role).value,
            User.is_active.is_(True),
        )
    )
    return result.scalar_one_or_none()
