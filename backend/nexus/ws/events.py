"""
WebSocket event handlers.
"""
import json
import logging
from typing import Any, Awaitable, Callable, Dict, Iterable, Optional

from fastapi import WebSocket

from nexus.auth.identity import Participant
from nexus.ws.auth import validate_ws_token
from nexus.ws.connection_manager import ClientConnection, ConnectionManager
from nexus.ws.message_types import MessageSchema, MessageType
from nexus.ws.relay import MessageRelay
from nexus.ws.rooms import room_id

logger = logging.getLogger(__name__)

TokenValidator = Callable[[Optional[str]], Awaitable[Optional[Participant]]]


class WebSocketEventHandler:
    """
    Handler for WebSocket events and messages.
    Authenticates new connections, tracks presence and routes incoming
    events to rooms, private channels or the requester.
    """

    def __init__(
        self,
        connection_manager: ConnectionManager,
        relay: Optional[MessageRelay] = None,
        token_validator: Optional[TokenValidator] = None,
    ):
        """
        Initialize the event handler with a connection manager.

        Args:
            connection_manager: The WebSocket connection manager
            relay: Message relay (built over the same manager if omitted)
            token_validator: Resolves a handshake token to a participant
        """
        self.connection_manager = connection_manager
        self.relay = relay or MessageRelay(connection_manager)
        self.token_validator = token_validator or validate_ws_token

    # -- lifecycle --

    async def connect(self, websocket: WebSocket, token: Optional[str]) -> Optional[ClientConnection]:
        """
        Authenticate a new connection and bring the participant online.

        Returns:
            Optional[ClientConnection]: None if the token was rejected, in which
            case the registry is left untouched and the caller must close the socket
        """
        participant = await self.token_validator(token)
        if participant is None or not participant.is_active:
            logger.info("[WS] Connection rejected: invalid token or inactive user")
            return None

        connection = ClientConnection(websocket, participant)
        self.connection_manager.register(participant.participant_id, connection)
        await self.relay.broadcast(MessageSchema.presence_message(participant, True), exclude=connection)
        logger.info(f"[WS] Participant {participant.participant_id} online ({self.connection_manager.get_total_connections()} connected)")
        return connection

    async def disconnect(self, connection: ClientConnection):
        """
        Tear down a connection.

        The offline broadcast only goes out when this connection was still the
        registered one; a superseded connection closes silently.
        """
        connection.rooms.clear()
        removed = self.connection_manager.unregister(connection.participant_id, connection)
        if removed:
            await self.relay.broadcast(MessageSchema.presence_message(connection.participant, False))
            logger.info(f"[WS] Participant {connection.participant_id} offline")

    # -- routing --

    async def handle_frame(self, connection: ClientConnection, frame: Dict[str, Any]):
        """
        Decode one ASGI `websocket.receive` message and dispatch it.

        Binary frames are accepted when they hold UTF-8 text.
        """
        raw = frame.get("text")
        if raw is None and frame.get("bytes") is not None:
            try:
                raw = frame["bytes"].decode("utf-8")
            except UnicodeDecodeError:
                raw = None
        if raw is None:
            logger.warning(f"[WS] Undecodable frame from participant {connection.participant_id}")
            await connection.send(MessageSchema.error_message("Frame must be UTF-8 encoded JSON"))
            return

        await self.handle_raw(connection, raw)

    async def handle_raw(self, connection: ClientConnection, raw: str):
        """
        Parse one text frame and dispatch it.
        """
        try:
            data = json.loads(raw)
        except (TypeError, ValueError):
            logger.warning(f"[WS] Invalid JSON from participant {connection.participant_id}")
            await connection.send(MessageSchema.error_message("Invalid JSON format"))
            return

        if not isinstance(data, dict):
            await connection.send(MessageSchema.error_message("Message must be a JSON object"))
            return

        await self.dispatch(connection, data)

    async def dispatch(self, connection: ClientConnection, data: Dict[str, Any]):
        """
        Route a decoded client event to its handler.

        A failure inside one event is reported back to the sender as an error
        event; it never ends the connection.
        """
        message_type_str = data.get("type")
        if not message_type_str:
            await connection.send(MessageSchema.error_message("Message type missing"))
            return

        try:
            message_type = MessageType(message_type_str)
        except ValueError:
            logger.warning(f"[WS] Unknown message type from {connection.participant_id}: {message_type_str}")
            await connection.send(MessageSchema.error_message(f"Unknown message type: {message_type_str}"))
            return

        try:
            if message_type == MessageType.JOIN_CHAT:
                other_id = self._require_id(data, "otherId")
                if other_id is None:
                    await connection.send(MessageSchema.error_message("otherId is required"))
                    return
                await self.join_chat(connection, other_id)

            elif message_type == MessageType.LEAVE_CHAT:
                other_id = self._require_id(data, "otherId")
                if other_id is None:
                    await connection.send(MessageSchema.error_message("otherId is required"))
                    return
                await self.leave_chat(connection, other_id)

            elif message_type == MessageType.SEND_MESSAGE:
                receiver_id = self._require_id(data, "receiverId")
                if receiver_id is None:
                    await connection.send(MessageSchema.error_message("receiverId is required"))
                    return
                await self.relay.send_message(connection, receiver_id, data.get("content"))

            elif message_type == MessageType.TYPING:
                receiver_id = self._require_id(data, "receiverId")
                if receiver_id is None:
                    await connection.send(MessageSchema.error_message("receiverId is required"))
                    return
                is_typing = data.get("isTyping")
                if not isinstance(is_typing, bool):
                    await connection.send(MessageSchema.error_message("isTyping must be a boolean"))
                    return
                await self.typing(connection, receiver_id, is_typing)

            elif message_type == MessageType.GET_ONLINE_STATUS:
                user_ids = data.get("userIds")
                if not isinstance(user_ids, list):
                    await connection.send(MessageSchema.error_message("userIds must be a list"))
                    return
                await self.online_status(connection, user_ids)

            elif message_type == MessageType.PING:
                await connection.send(MessageSchema.pong_message())

            else:
                # Server -> client types are not accepted from clients
                await connection.send(MessageSchema.error_message(f"Unsupported message type: {message_type.value}"))

        except Exception as e:
            logger.exception(f"[WS] Error handling {message_type.value} from {connection.participant_id}: {e}")
            await connection.send(MessageSchema.error_message(f"Failed to process {message_type.value}"))

    @staticmethod
    def _require_id(data: Dict[str, Any], key: str) -> Optional[str]:
        value = data.get(key)
        if value is None or isinstance(value, (dict, list, bool)):
            return None
        value = str(value).strip()
        return value or None

    # -- events --

    async def join_chat(self, connection: ClientConnection, other_id: str) -> str:
        """
        Subscribe the connection to its room with `other_id`. Idempotent.
        """
        room = room_id(connection.participant_id, other_id)
        connection.join(room)
        logger.debug(f"[CHAT] {connection.participant_id} joined room {room}")
        return room

    async def leave_chat(self, connection: ClientConnection, other_id: str) -> str:
        """
        Unsubscribe the connection from its room with `other_id`. Idempotent.
        """
        room = room_id(connection.participant_id, other_id)
        connection.leave(room)
        logger.debug(f"[CHAT] {connection.participant_id} left room {room}")
        return room

    async def typing(self, connection: ClientConnection, receiver_id: str, is_typing: bool):
        """
        Forward a typing indicator to the other subscribers of the room.
        """
        room = room_id(connection.participant_id, receiver_id)
        message = MessageSchema.user_typing(connection.participant, is_typing)
        await self.relay.broadcast_to_room(room, message, exclude=connection)

    async def online_status(self, connection: ClientConnection, user_ids: Iterable[Any]):
        """
        Reply to the requester only with the online flag of each requested id.
        """
        statuses = {str(user_id): self.connection_manager.is_online(str(user_id)) for user_id in user_ids}
        await connection.send(MessageSchema.online_status(statuses))

    # -- server side notifications --

    async def notify_user(self, participant_id: str, message: Dict[str, Any]) -> bool:
        """
        Push a server-originated event to one participant's private channel.
        """
        return await self.relay.notify_participant(participant_id, message)
