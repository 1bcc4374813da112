"""
Real-time message relay.

Fans chat events out to connected subscribers. The relay is not the system of
record: nothing sent through it is persisted, and durable storage stays with
the REST chat endpoints.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from nexus.core.config import settings
from nexus.core.validators import preview, validate_message_content
from nexus.ws.connection_manager import ClientConnection, ConnectionManager
from nexus.ws.message_types import MessageSchema
from nexus.ws.rooms import room_id

logger = logging.getLogger(__name__)


class MessageRelay:
    """
    Routes events to rooms, private channels and the whole server.

    A participant's private channel is their registry entry: anything addressed
    to a participant id goes to whatever connection the registry currently holds.
    """

    def __init__(
        self,
        connection_manager: ConnectionManager,
        max_length: Optional[int] = None,
        preview_length: Optional[int] = None,
    ):
        self.connection_manager = connection_manager
        self.max_length = max_length or settings.MESSAGE_MAX_LENGTH
        self.preview_length = preview_length or settings.NOTIFICATION_PREVIEW_LENGTH

    async def send_message(self, sender: ClientConnection, receiver_id: str, content) -> bool:
        """
        Relay a chat message from a connected sender.

        The message goes to every other subscriber of the (sender, receiver) room,
        never back to the sending connection, and a truncated notification goes
        to the receiver's private channel whether or not they are in the room.

        Args:
            sender: The sending connection
            receiver_id: Target participant id (not checked against the user store)
            content: Message text

        Returns:
            bool: False if the content was rejected and nothing was sent
        """
        is_valid, error = validate_message_content(content, self.max_length)
        if not is_valid:
            logger.warning(f"[RELAY] Dropped message from {sender.participant_id} to {receiver_id}: {error}")
            return False

        room = room_id(sender.participant_id, receiver_id)
        timestamp = datetime.now(timezone.utc).isoformat()

        message = MessageSchema.new_message(sender.participant, receiver_id, content, timestamp)
        delivered = await self.broadcast_to_room(room, message, exclude=sender)

        notification = MessageSchema.message_notification(
            sender.participant,
            preview(content, self.preview_length),
            timestamp,
        )
        receiver = self.connection_manager.handle_for(receiver_id)
        if receiver is not None and receiver is not sender:
            await receiver.send(notification)

        logger.debug(f"[RELAY] {sender.participant_id} -> room {room}: {delivered} recipient(s)")
        return True

    async def broadcast_to_room(self, room: str, message: dict, exclude: Optional[ClientConnection] = None) -> int:
        """
        Send a message to every connection subscribed to a room.

        Returns:
            int: Number of connections the message was written to
        """
        delivered = 0
        for member in self.connection_manager.room_members(room):
            if member is exclude:
                continue
            if await member.send(message):
                delivered += 1
        return delivered

    async def notify_participant(self, participant_id: str, message: dict) -> bool:
        """
        Send a message to a participant's private channel.

        Returns:
            bool: True if the participant was online and the write succeeded
        """
        connection = self.connection_manager.handle_for(str(participant_id))
        if connection is None:
            logger.debug(f"[RELAY] Participant {participant_id} offline, notification not delivered")
            return False
        return await connection.send(message)

    async def broadcast(self, message: dict, exclude: Optional[ClientConnection] = None):
        """
        Send a message to every connected participant.

        Args:
            message: The message to broadcast
            exclude: Connection to skip (usually the one the event came from)
        """
        for connection in self.connection_manager.connections():
            if connection is exclude:
                continue
            await connection.send(message)
