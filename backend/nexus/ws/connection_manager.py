from fastapi import WebSocket
from typing import Dict, Iterator, List, Optional, Set
import logging

from nexus.auth.identity import Participant

logger = logging.getLogger(__name__)


class ClientConnection:
    """
    One live WebSocket plus the identity it authenticated as.

    Room membership is held here, per connection, and nowhere else: a room
    exists only as the set of connections whose `rooms` contain its id.
    """

    def __init__(self, websocket: WebSocket, participant: Participant):
        self.websocket = websocket
        self.participant = participant
        self.rooms: Set[str] = set()

    @property
    def participant_id(self) -> str:
        return self.participant.participant_id

    def join(self, room: str):
        self.rooms.add(room)

    def leave(self, room: str):
        self.rooms.discard(room)

    async def send(self, message: dict) -> bool:
        """
        Send a message to this connection.

        Returns:
            bool: False if the socket refused the write (already closing, network loss)
        """
        try:
            await self.websocket.send_json(message)
            return True
        except Exception as e:
            logger.warning(f"[WS] Error sending to participant {self.participant_id}: {e}")
            return False

    def __repr__(self) -> str:
        return f"ClientConnection(participant_id={self.participant_id!r}, rooms={sorted(self.rooms)!r})"


class ConnectionManager:
    """
    Registry of live connections keyed by participant id.

    At most one connection per participant: a later connection from the same
    participant replaces the earlier mapping (last writer wins).

    Mutators never await, so under the asyncio event loop each call runs to
    completion before another connection's handler can touch the registry.
    """

    def __init__(self):
        # Maps participant_id directly to its connection
        self.active_connections: Dict[str, ClientConnection] = {}

    def register(self, participant_id: str, connection: ClientConnection) -> Optional[ClientConnection]:
        """
        Store or overwrite the connection for a participant.

        Args:
            participant_id: Authenticated participant id
            connection: The participant's new connection

        Returns:
            Optional[ClientConnection]: The connection that was replaced, if any
        """
        if not participant_id:
            logger.error("[WS] Cannot register without participant_id")
            raise ValueError("participant_id is required")

        previous = self.active_connections.get(participant_id)
        if previous is not None and previous is not connection:
            logger.info(f"[WS] Replacing existing connection for participant {participant_id}")

        self.active_connections[participant_id] = connection
        logger.info(f"[WS] Registered participant {participant_id}")
        return previous

    def unregister(self, participant_id: str, connection: Optional[ClientConnection] = None) -> bool:
        """
        Remove the mapping for a participant.

        When `connection` is given, the mapping is only removed if it still points
        at that connection; a superseded connection cannot evict its replacement.

        Returns:
            bool: True if a mapping was removed
        """
        current = self.active_connections.get(participant_id)
        if current is None:
            return False

        if connection is not None and current is not connection:
            logger.info(f"[WS] Stale connection for participant {participant_id} closed, keeping newer one")
            return False

        del self.active_connections[participant_id]
        logger.info(f"[WS] Unregistered participant {participant_id}")
        return True

    def is_online(self, participant_id: str) -> bool:
        """
        Check if a specific participant is connected.
        """
        return participant_id in self.active_connections

    def handle_for(self, participant_id: str) -> Optional[ClientConnection]:
        """
        Get the participant's connection, or None if they are offline.
        """
        return self.active_connections.get(participant_id)

    def list_online(self) -> Set[str]:
        """
        Snapshot of the ids of every connected participant.
        """
        return set(self.active_connections)

    def connections(self) -> List[ClientConnection]:
        """
        Snapshot of every live connection, safe to iterate across awaits.
        """
        return list(self.active_connections.values())

    def room_members(self, room: str) -> Iterator[ClientConnection]:
        """
        Connections currently subscribed to a room.
        """
        return (connection for connection in self.connections() if room in connection.rooms)

    def get_total_connections(self) -> int:
        """
        Get the total number of active connections.

        Returns:
            int: Total number of connections
        """
        return len(self.active_connections)
