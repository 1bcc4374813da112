"""
Collaboration-request workflow.

pending -> accepted | rejected. Uniqueness of the (investor, entrepreneur)
pair is enforced by the database constraint and the terminal-state guard by
conditional statements, so concurrent callers are resolved by storage, not by
locks held here.
"""
import logging
from typing import Awaitable, Callable, Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from nexus.auth.identity import find_entrepreneur
from nexus.core.config import settings
from nexus.core.enums import RequestStatus, Role
from nexus.core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from nexus.crud import request as request_crud
from nexus.db.models.request import CollaborationRequest
from nexus.db.models.user import User
from nexus.schemas.request import RequestRead
from nexus.ws.message_types import MessageSchema, MessageType

logger = logging.getLogger(__name__)

Notifier = Callable[[str, Dict], Awaitable[bool]]


def serialize_request(db_request: CollaborationRequest) -> Dict:
    """Wire form of a request, as carried by HTTP responses and notifications."""
    return RequestRead.model_validate(db_request).model_dump(mode="json", by_alias=True)


class CollaborationRequestService:
    """
    Create, respond to, delete and list collaboration requests.

    Every mutation commits before its notification goes out, so a participant
    is never told about a record that could still be rolled back.
    """

    def __init__(self, db: AsyncSession, notifier: Optional[Notifier] = None):
        self.db = db
        self.notifier = notifier

    async def create(self, investor: User, entrepreneur_id, message: Optional[str]) -> CollaborationRequest:
        """
        Send a pending request from an investor to an entrepreneur.

        Raises:
            AuthorizationError: caller is not an investor
            ValidationError: message missing or out of bounds
            NotFoundError: no active entrepreneur with that id
            ConflictError: a request for the pair already exists, whatever its status
        """
        self._require_role(investor, Role.INVESTOR)
        message = self._validate_request_message(message)

        entrepreneur = await find_entrepreneur(self.db, entrepreneur_id)
        if entrepreneur is None:
            raise NotFoundError("Entrepreneur not found")

        # Plain values: a rollback below expires every instance in the session
        investor_id, investor_name, entrepreneur_id = investor.id, investor.name, entrepreneur.id

        existing = await request_crud.get_request_by_pair(self.db, investor_id, entrepreneur_id)
        if existing is not None:
            raise ConflictError("Request already sent to this entrepreneur")

        try:
            db_request = await request_crud.create_request(self.db, investor_id, entrepreneur_id, message)
            await self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent create for the same pair
            await self.db.rollback()
            logger.info(f"[REQUESTS] Duplicate request {investor_id} -> {entrepreneur_id} rejected by constraint")
            raise ConflictError("Request already sent to this entrepreneur")

        db_request = await request_crud.get_request(self.db, db_request.id)
        logger.info(f"[REQUESTS] Request {db_request.id} created: {investor_id} -> {entrepreneur_id}")

        await self._notify(
            str(entrepreneur_id),
            MessageSchema.request_event(
                MessageType.NEW_REQUEST,
                serialize_request(db_request),
                f"New collaboration request from {investor_name}",
            ),
        )
        return db_request

    async def respond(
        self,
        entrepreneur: User,
        request_id: UUID,
        status,
        response_message: Optional[str] = None,
    ) -> CollaborationRequest:
        """
        Accept or reject a pending request addressed to the entrepreneur.

        Missing, foreign and already-processed requests all fail the same way.
        """
        self._require_role(entrepreneur, Role.ENTREPRENEUR)

        try:
            new_status = RequestStatus(status)
        except ValueError:
            new_status = None
        if new_status is None or not new_status.is_terminal:
            raise ValidationError("Status must be either accepted or rejected", "status")

        if response_message is not None:
            response_message = response_message.strip() or None
            if response_message and len(response_message) > settings.MESSAGE_MAX_LENGTH:
                raise ValidationError(
                    f"Response message cannot exceed {settings.MESSAGE_MAX_LENGTH} characters",
                    "responseMessage",
                )

        updated = await request_crud.respond_to_pending(
            self.db, request_id, entrepreneur.id, new_status, response_message
        )
        if not updated:
            raise NotFoundError("Request not found or already processed")
        await self.db.commit()

        db_request = await request_crud.get_request(self.db, request_id)
        logger.info(f"[REQUESTS] Request {request_id} {new_status.value} by {entrepreneur.id}")

        await self._notify(
            str(db_request.investor_id),
            MessageSchema.request_event(
                MessageType.REQUEST_UPDATE,
                serialize_request(db_request),
                f"Your request was {new_status.value} by {entrepreneur.name}",
            ),
        )
        return db_request

    async def delete(self, investor: User, request_id: UUID):
        """
        Withdraw a pending request. Only the originating investor may do so.
        """
        self._require_role(investor, Role.INVESTOR)

        deleted = await request_crud.delete_pending(self.db, request_id, investor.id)
        if not deleted:
            raise NotFoundError("Request not found or cannot be deleted")
        await self.db.commit()
        logger.info(f"[REQUESTS] Request {request_id} deleted by {investor.id}")

    async def get(self, user: User, request_id: UUID) -> CollaborationRequest:
        """
        A request the caller is party to. Non-parties cannot tell it exists.
        """
        db_request = await request_crud.get_request(self.db, request_id)
        if db_request is None or user.id not in (db_request.investor_id, db_request.entrepreneur_id):
            raise NotFoundError("Request not found")
        return db_request

    async def list_for_user(
        self,
        user: User,
        status: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[CollaborationRequest], int]:
        """
        The caller's requests on either side, newest first.
        """
        status_filter = RequestStatus(status) if status else None
        skip = (page - 1) * limit
        return await request_crud.list_for_party(self.db, user.id, status_filter, skip=skip, limit=limit)

    @staticmethod
    def _require_role(user: User, role: Role):
        if Role(user.role) != role:
            raise AuthorizationError(f"Only {role.value}s can perform this action")

    @staticmethod
    def _validate_request_message(message: Optional[str]) -> str:
        message = (message or "").strip()
        if len(message) < settings.REQUEST_MESSAGE_MIN_LENGTH:
            raise ValidationError(
                f"Message must be at least {settings.REQUEST_MESSAGE_MIN_LENGTH} characters",
                "message",
            )
        if len(message) > settings.MESSAGE_MAX_LENGTH:
            raise ValidationError(
                f"Message cannot exceed {settings.MESSAGE_MAX_LENGTH} characters",
                "message",
            )
        return message

    async def _notify(self, participant_id: str, message: Dict):
        if self.notifier is None:
            return
        try:
            await self.notifier(participant_id, message)
        except Exception as e:
            # Record is already committed, the push is best effort
            logger.exception(f"[REQUESTS] Failed to notify {participant_id}: {e}")
