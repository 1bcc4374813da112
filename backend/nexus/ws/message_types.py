"""
WebSocket message type definitions.
"""
from enum import Enum
from typing import Any, Dict

from nexus.auth.identity import Participant


class MessageType(str, Enum):
    """Enum of WebSocket message types."""
    # Client -> server
    JOIN_CHAT = "joinChat"
    LEAVE_CHAT = "leaveChat"
    SEND_MESSAGE = "sendMessage"
    TYPING = "typing"
    GET_ONLINE_STATUS = "getOnlineStatus"

    # Server -> client: chat
    NEW_MESSAGE = "newMessage"
    MESSAGE_NOTIFICATION = "messageNotification"
    USER_TYPING = "userTyping"

    # Server -> client: presence
    ONLINE_STATUS = "onlineStatus"
    USER_ONLINE = "userOnline"
    USER_OFFLINE = "userOffline"

    # Server -> client: collaboration requests
    NEW_REQUEST = "newRequest"
    REQUEST_UPDATE = "requestUpdate"

    # System messages
    ERROR = "error"
    PING = "ping"
    PONG = "pong"


def _event(message_type: MessageType, data: Any) -> Dict[str, Any]:
    return {"type": message_type.value, "data": data}


class MessageSchema:
    """Message schema definitions for different message types."""

    @staticmethod
    def error_message(message: str) -> Dict[str, str]:
        """
        Create an error message.

        Args:
            message: Error message text

        Returns:
            Dict: Formatted error message
        """
        return {
            "type": MessageType.ERROR.value,
            "message": message
        }

    @staticmethod
    def pong_message() -> Dict[str, str]:
        """
        Create a pong message response.
        """
        return {"type": MessageType.PONG.value}

    @staticmethod
    def new_message(sender: Participant, receiver_id: str, content: str, created_at: str) -> Dict[str, Any]:
        """
        Ephemeral chat message fanned out to a room. Never persisted by the relay.
        """
        return _event(MessageType.NEW_MESSAGE, {
            "sender": {
                "id": sender.participant_id,
                "name": sender.name,
                "avatar": sender.avatar,
            },
            "receiver": {"id": receiver_id},
            "content": content,
            "createdAt": created_at,
            "read": False,
        })

    @staticmethod
    def stored_message(message: Dict[str, Any]) -> Dict[str, Any]:
        """
        `newMessage` carrying a durable record from the REST path.
        """
        return _event(MessageType.NEW_MESSAGE, message)

    @staticmethod
    def message_notification(sender: Participant, content_preview: str, timestamp: str) -> Dict[str, Any]:
        """
        Out-of-room notification sent to a receiver's private channel.
        """
        return _event(MessageType.MESSAGE_NOTIFICATION, {
            "senderId": sender.participant_id,
            "senderName": sender.name,
            "content": content_preview,
            "timestamp": timestamp,
        })

    @staticmethod
    def user_typing(sender: Participant, is_typing: bool) -> Dict[str, Any]:
        return _event(MessageType.USER_TYPING, {
            "userId": sender.participant_id,
            "userName": sender.name,
            "isTyping": is_typing,
        })

    @staticmethod
    def online_status(statuses: Dict[str, bool]) -> Dict[str, Any]:
        return _event(MessageType.ONLINE_STATUS, statuses)

    @staticmethod
    def presence_message(participant: Participant, online: bool) -> Dict[str, Any]:
        """
        `userOnline` / `userOffline` broadcast.
        """
        message_type = MessageType.USER_ONLINE if online else MessageType.USER_OFFLINE
        return _event(message_type, {
            "userId": participant.participant_id,
            "userName": participant.name,
        })

    @staticmethod
    def request_event(message_type: MessageType, request: Dict[str, Any], message: str) -> Dict[str, Any]:
        """
        `newRequest` / `requestUpdate` notification.

        Args:
            message_type: NEW_REQUEST or REQUEST_UPDATE
            request: Serialised collaboration request
            message: Human readable summary
        """
        if message_type not in (MessageType.NEW_REQUEST, MessageType.REQUEST_UPDATE):
            raise ValueError(f"Not a request event: {message_type}")
        return _event(message_type, {"request": request, "message": message})
