"""
Shared dependencies for API endpoints.
"""
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from nexus.db.session import get_db
from nexus.services.chat import ChatService
from nexus.services.requests import CollaborationRequestService
from nexus.ws.events import WebSocketEventHandler


# Dependency function signature for WS Handler (implementation provided by override in main.py)
async def get_ws_handler() -> WebSocketEventHandler:
    """
    Dependency placeholder for WebSocketEventHandler.
    The actual implementation is injected via app.dependency_overrides in main.py.
    """
    # This placeholder should never be executed if overrides are set correctly.
    raise NotImplementedError("WebSocket handler dependency not overridden")


async def get_request_service(
    db: AsyncSession = Depends(get_db),
    ws_handler: WebSocketEventHandler = Depends(get_ws_handler),
) -> CollaborationRequestService:
    return CollaborationRequestService(db, notifier=ws_handler.notify_user)


async def get_chat_service(
    db: AsyncSession = Depends(get_db),
    ws_handler: WebSocketEventHandler = Depends(get_ws_handler),
) -> ChatService:
    return ChatService(db, notifier=ws_handler.notify_user)
