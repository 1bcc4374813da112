"""
Identity store: resolves tokens and user ids to participants.

Both the HTTP dependencies and the WebSocket handshake go through here, so
there is exactly one place that decides whether a token is still good.
"""
import logging
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from nexus.core import security
from nexus.core.enums import Role
from nexus.crud import user as user_crud
from nexus.db.models.user import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Participant:
    """The identity attached to a connection or an HTTP request."""
    participant_id: str
    name: str
    role: Role
    is_active: bool = True
    avatar: Optional[str] = None

    @classmethod
    def from_user(cls, user: User) -> "Participant":
        return cls(
            participant_id=str(user.id),
            name=user.name,
            role=Role(user.role),
            is_active=bool(user.is_active),
            avatar=user.avatar,
        )


def _parse_uuid(value) -> Optional[UUID]:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except (TypeError, ValueError):
        return None


async def get_user_for_token(db: AsyncSession, token: Optional[str]) -> Optional[User]:
    """
    Verify a bearer token and load its user.

    Returns:
        Optional[User]: The user if the token is valid and the user exists, None otherwise
    """
    if not token:
        return None

    payload = security.decode_access_token(token)
    if payload is None:
        logger.info("[AUTH] Token failed verification")
        return None

    user_id = _parse_uuid(payload.get("sub"))
    if user_id is None:
        logger.info("[AUTH] Token subject is not a valid user id")
        return None

    return await user_crud.get_user(db, user_id)


async def resolve_token(db: AsyncSession, token: Optional[str]) -> Optional[Participant]:
    """
    Resolve a token to a participant identity.

    Returns:
        Optional[Participant]: None when the token is invalid or the user is gone
    """
    user = await get_user_for_token(db, token)
    if user is None:
        return None
    return Participant.from_user(user)


async def find_entrepreneur(db: AsyncSession, user_id) -> Optional[User]:
    """Active entrepreneur with this id, or None."""
    parsed = _parse_uuid(user_id)
    if parsed is None:
        return None
    return await user_crud.get_active_by_role(db, parsed, Role.ENTREPRENEUR)
