"""
Email/password registration and login.
"""
import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from nexus.auth.dependencies import get_current_user
from nexus.core.exceptions import AuthenticationError, ValidationError
from nexus.core.security import create_access_token, get_password_hash, verify_password
from nexus.crud import user as user_crud
from nexus.db.base import utcnow
from nexus.db.models.user import User
from nexus.db.session import get_db
from nexus.schemas.auth import AuthResult, LoginRequest, RegisterRequest
from nexus.schemas.common import ApiResponse
from nexus.schemas.user import UserRead

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _auth_result(user: User) -> AuthResult:
    token = create_access_token(str(user.id), user.role)
    return AuthResult(token=token, user=UserRead.model_validate(user))


@router.post(
    "/register",
    response_model=ApiResponse[AuthResult],
    status_code=status.HTTP_201_CREATED,
    summary="Register with Email/Password",
)
async def register(
    registration: RegisterRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Create an account and return a token for it.

    Duplicate emails are rejected with 400.
    """
    email = registration.email.lower().strip()
    logger.info(f"[AUTH] Registration attempt for email: {email}")

    if await user_crud.get_by_email(db, email) is not None:
        raise ValidationError("User already exists with this email", "email")

    try:
        user = await user_crud.create_user(
            db,
            name=registration.name,
            email=email,
            password_hash=get_password_hash(registration.password),
            role=registration.role,
            location=registration.location,
        )
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ValidationError("User already exists with this email", "email")

    logger.info(f"[AUTH] New {user.role} registered: {user.id}")
    return ApiResponse(message="User registered successfully", data=_auth_result(user))


@router.post(
    "/login",
    response_model=ApiResponse[AuthResult],
    summary="Login with Email/Password",
)
async def login(
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Authenticate with email and password.

    Raises:
        AuthenticationError: wrong credentials or deactivated account
    """
    user = await user_crud.get_by_email(db, credentials.email)

    if user is None or not verify_password(credentials.password, user.password_hash):
        logger.warning(f"[AUTH] Invalid credentials for email: {credentials.email}")
        raise AuthenticationError("Invalid credentials")

    if not user.is_active:
        logger.warning(f"[AUTH] Login attempt for deactivated user: {user.id}")
        raise AuthenticationError("Account is deactivated")

    user.last_login = utcnow()
    await db.commit()

    logger.info(f"[AUTH] Login successful for user: {user.id}")
    return ApiResponse(message="Login successful", data=_auth_result(user))


@router.get("/me", response_model=ApiResponse[UserRead], summary="Current user")
async def read_me(current_user: User = Depends(get_current_user)):
    return ApiResponse(data=UserRead.model_validate(current_user))
