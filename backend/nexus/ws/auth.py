import logging
from typing import Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from nexus.auth.identity import Participant, resolve_token
from nexus.db.session import SessionLocal

logger = logging.getLogger(__name__)


async def validate_ws_token(
    token: Optional[str],
    session_factory: async_sessionmaker = SessionLocal,
) -> Optional[Participant]:
    """
    Validate a token presented when a WebSocket connects.

    Args:
        token: The bearer token from the handshake
        session_factory: Where to open the short-lived lookup session

    Returns:
        Optional[Participant]: The participant if the token is valid and the
        user is active, None otherwise
    """
    if not token:
        logger.info("[WS] No token provided for validation")
        return None

    try:
        async with session_factory() as db:
            participant = await resolve_token(db, token)
    except Exception as e:
        logger.exception(f"[WS] Database error during token validation: {e}")
        return None

    if participant is None:
        logger.info("[WS] No valid user found for token")
        return None

    if not participant.is_active:
        logger.info(f"[WS] Rejecting inactive participant {participant.participant_id}")
        return None

    return participant
