"""
Durable direct messaging.

This is the system of record for chat: messages are written here before any
push is attempted, and read state only changes here.
"""
import logging
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from nexus.core.config import settings
from nexus.core.exceptions import NotFoundError, ValidationError
from nexus.core.validators import validate_message_content
from nexus.crud import message as message_crud
from nexus.crud import user as user_crud
from nexus.db.models.message import Message
from nexus.db.models.user import User
from nexus.schemas.message import MessageRead
from nexus.services.requests import Notifier
from nexus.ws.message_types import MessageSchema

logger = logging.getLogger(__name__)


def serialize_message(db_message: Message) -> Dict:
    return MessageRead.model_validate(db_message).model_dump(mode="json", by_alias=True)


class ChatService:
    def __init__(self, db: AsyncSession, notifier: Optional[Notifier] = None):
        self.db = db
        self.notifier = notifier

    async def _active_user(self, user_id: UUID, message: str) -> User:
        user = await user_crud.get_user(self.db, user_id)
        if user is None or not user.is_active:
            raise NotFoundError(message)
        return user

    async def send(self, sender: User, receiver_id: UUID, content: Optional[str]) -> Message:
        """
        Persist a message, then push it to the receiver's private channel.

        The push goes to the receiver only; room subscribers are not involved
        on this path.
        """
        is_valid, error = validate_message_content(content, settings.MESSAGE_MAX_LENGTH)
        if not is_valid:
            raise ValidationError(error, "content")

        receiver = await self._active_user(receiver_id, "Receiver not found")

        db_message = await message_crud.create_message(self.db, sender.id, receiver.id, content.strip())
        await self.db.commit()
        logger.info(f"[CHAT] Message {db_message.id} stored: {sender.id} -> {receiver.id}")

        if self.notifier is not None:
            try:
                await self.notifier(str(receiver.id), MessageSchema.stored_message(serialize_message(db_message)))
            except Exception as e:
                logger.exception(f"[CHAT] Failed to push message {db_message.id}: {e}")

        return db_message

    async def conversation(
        self,
        user: User,
        other_id: UUID,
        page: int = 1,
        limit: int = 50,
    ) -> Tuple[List[Message], int]:
        """
        One page of the conversation with another user, oldest first.

        Fetching the page marks the other user's messages to the caller as read.
        The returned rows carry the read state from before that update.
        """
        other = await self._active_user(other_id, "User not found")

        messages, total = await message_crud.get_conversation(
            self.db, user.id, other.id, skip=(page - 1) * limit, limit=limit
        )
        marked = await message_crud.mark_read(self.db, other.id, user.id)
        await self.db.commit()
        if marked:
            logger.debug(f"[CHAT] Marked {marked} message(s) from {other.id} as read for {user.id}")

        messages.reverse()
        return messages, total

    async def conversations(self, user: User) -> List[Dict]:
        return await message_crud.get_conversations(self.db, user.id)

    async def mark_read(self, user: User, other_id: UUID) -> int:
        modified = await message_crud.mark_read(self.db, other_id, user.id)
        await self.db.commit()
        return modified

    async def unread_count(self, user: User) -> int:
        return await message_crud.count_unread(self.db, user.id)
