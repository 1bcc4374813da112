"""
Main module for the FastAPI application.
"""
from contextlib import asynccontextmanager
from typing import Optional
import logging

from fastapi import FastAPI, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from starlette import status

from nexus.__version__ import __version__
from nexus.core.config import settings
from nexus.db.base import Base
from nexus.db.session import engine
from nexus.api.errors import register_exception_handlers
from nexus.api.dependencies import get_ws_handler as shared_get_ws_handler
from nexus.api.ws import router as ws_router
from nexus.api.v1.requests import router as requests_router
from nexus.api.v1.chat import router as chat_router
from nexus.auth.routes import router as auth_router
from nexus.ws.connection_manager import ConnectionManager
from nexus.ws.events import WebSocketEventHandler

# Setup logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# Lifespan event handler
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan event handler - runs on startup and shutdown.
    """
    logger.info(f"Business Nexus API {__version__} starting")
    logger.info(f"Database: {'DATABASE_URL' if settings.DATABASE_URL else 'DB_* env vars'}")

    # Development convenience; production schemas come from Alembic migrations
    if settings.AUTO_CREATE_TABLES:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Tables created from ORM metadata")

    yield

    # Shutdown
    logger.info("Business Nexus API shutting down")
    await engine.dispose()


app = FastAPI(
    title="Business Nexus API",
    description="Investor and entrepreneur collaboration: requests, chat and presence",
    version=__version__,
    lifespan=lifespan,
)

# Initialize the WebSocket connection manager
ws_manager = ConnectionManager()

# Initialize the WebSocket event handler
ws_event_handler = WebSocketEventHandler(ws_manager)

# Configure CORS
cors_origins = settings.CORS_ORIGINS if isinstance(settings.CORS_ORIGINS, list) else [settings.CORS_ORIGINS]
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


# Override WebSocket handler dependency for API routers
async def override_get_ws_handler() -> WebSocketEventHandler:
    return ws_event_handler

# Apply override to the shared dependency function
app.dependency_overrides[shared_get_ws_handler] = override_get_ws_handler

# Include routers
app.include_router(auth_router, prefix="/api")
app.include_router(requests_router, prefix="/api")
app.include_router(chat_router, prefix="/api")
app.include_router(ws_router)


@app.get("/")
async def root():
    """
    Root endpoint for health checks.
    """
    return {"success": True, "message": "Business Nexus API is running"}

@app.get("/health")
async def health():
    """
    Health check endpoint.
    """
    return {"status": "ok"}

@app.get("/version", tags=["health"])
async def get_version():
    """
    Get API version and feature flags.

    Returns:
        dict: Version information including:
            - version: API version string
            - features: Dictionary of available features
            - min_client_version: Minimum compatible client version
    """
    from nexus.core.version import get_version_info
    return get_version_info()


def _extract_token(websocket: WebSocket) -> Optional[str]:
    """Token from `?token=` or an `Authorization: Bearer` header."""
    token = websocket.query_params.get("token")
    if token:
        return token
    authorization = websocket.headers.get("authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials:
        return credentials.strip()
    return None


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """
    WebSocket endpoint for real-time chat, typing and presence.

    Connection URL: wss://server/ws?token={access_token}

    The token is checked once, here. A rejected connection is closed with 1008
    and never reaches the registry.
    """
    await websocket.accept()

    connection = await ws_event_handler.connect(websocket, _extract_token(websocket))
    if connection is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason="Authentication failed")
        return

    try:
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                logger.info(f"[WS] Participant {connection.participant_id} disconnected (code {frame.get('code')})")
                break
            await ws_event_handler.handle_frame(connection, frame)

    except Exception as e:
        logger.exception(f"[WS] Error in WebSocket loop for participant {connection.participant_id}: {e}")
    finally:
        # Runs on clean close, network loss and server errors alike
        await ws_event_handler.disconnect(connection)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host=settings.API_HOST, port=settings.API_PORT, reload=False)
