"""
API endpoints for WebSocket-related functionality.
"""
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from nexus.api.dependencies import get_ws_handler
from nexus.auth.dependencies import get_current_user
from nexus.schemas.common import ApiResponse
from nexus.ws.events import WebSocketEventHandler


class StatusResponse(BaseModel):
    """Live connection counts."""
    connections: int
    online: int


# Initialize router
router = APIRouter(
    prefix="/ws",
    tags=["websocket"],
    dependencies=[Depends(get_current_user)],
)


@router.get("/status", response_model=ApiResponse[StatusResponse])
async def get_ws_status(ws_handler: WebSocketEventHandler = Depends(get_ws_handler)):
    """
    Get the current WebSocket connection status.

    Requires authentication. Only counts are exposed, never who is connected.
    """
    manager = ws_handler.connection_manager
    return ApiResponse(
        data=StatusResponse(
            connections=manager.get_total_connections(),
            online=len(manager.list_online()),
        )
    )
