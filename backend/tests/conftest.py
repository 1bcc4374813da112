# tests/conftest.py

import os

# Must be set before nexus is imported: settings and the engine are built at import time
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ["AUTO_CREATE_TABLES"] = "false"

from typing import Any, Dict, List, Optional

import pytest
from httpx import ASGITransport, AsyncClient

from nexus.auth.identity import Participant
from nexus.core.enums import Role
from nexus.core.security import create_access_token, get_password_hash
from nexus.crud import user as user_crud
from nexus.db.models import Base
from nexus.db.session import SessionLocal, engine
from nexus.ws.connection_manager import ClientConnection

TEST_PASSWORD = "secret123"
_PASSWORD_HASH = get_password_hash(TEST_PASSWORD)


# --- In-memory WebSocket stand-in ---
class FakeWebSocket:
    """Records every JSON frame sent to it."""

    def __init__(self, fail: bool = False):
        self.sent: List[Dict[str, Any]] = []
        self.fail = fail

    async def send_json(self, data):
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(data)

    def of_type(self, message_type: str) -> List[Dict[str, Any]]:
        return [m for m in self.sent if m.get("type") == message_type]


def make_participant(participant_id: str, name: Optional[str] = None, role: Role = Role.INVESTOR, **kwargs) -> Participant:
    return Participant(participant_id=participant_id, name=name or participant_id.title(), role=role, **kwargs)


def make_connection(participant_id: str, **kwargs) -> ClientConnection:
    return ClientConnection(FakeWebSocket(), make_participant(participant_id, **kwargs))


# --- Database ---
@pytest.fixture
async def database():
    """Fresh schema on the shared in-memory SQLite connection."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db_session(database):
    async with SessionLocal() as session:
        yield session


@pytest.fixture
def user_factory(database):
    """Create users directly through the CRUD layer, skipping bcrypt per user."""

    async def create(name: str, role: Role, email: Optional[str] = None, is_active: bool = True):
        async with SessionLocal() as session:
            user = await user_crud.create_user(
                session,
                name=name,
                email=email or f"{name.lower().replace(' ', '.')}@example.com",
                password_hash=_PASSWORD_HASH,
                role=role,
            )
            user.is_active = is_active
            await session.commit()
            return user

    return create


def auth_headers(user) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(str(user.id), user.role)}"}


# --- HTTP ---
@pytest.fixture
async def client(database):
    from main import app

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def ws_manager():
    """The application's live registry, emptied after each test."""
    from main import ws_manager as manager

    yield manager
    manager.active_connections.clear()
