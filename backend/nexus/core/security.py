from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import jwt, JWTError

# Import passlib for hashing
from passlib.context import CryptContext

from .config import settings
from .enums import Role

# --- Hashing Setup ---
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)

def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)
# --- End Hashing Setup ---


def create_access_token(
    participant_id: str,
    role: Role,
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    Issue a signed access token for a participant.

    Args:
        participant_id: The user's id, stored as the `sub` claim
        role: The user's role, stored as the `role` claim
        expires_delta: Override for the configured lifetime

    Returns:
        str: Encoded JWT
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.JWT_EXPIRATION_MINUTES)
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode = {"sub": str(participant_id), "role": Role(role).value, "exp": expire}
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Verify signature and expiry of an access token.

    Returns:
        The claims if the token is valid and carries a subject, None otherwise.
    """
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None
    if not payload.get("sub"):
        return None
    return payload
