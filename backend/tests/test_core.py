from datetime import timedelta

import pytest

from nexus.core.config import Settings
from nexus.core.enums import RequestStatus, Role
from nexus.core.security import create_access_token, decode_access_token, get_password_hash, verify_password
from nexus.core.validators import preview, validate_message_content, validate_password


class TestValidators:

    @pytest.mark.parametrize("content,valid", [
        ("hi", True),
        ("a" * 1000, True),
        ("a" * 1001, False),
        ("", False),
        ("   ", False),
        (None, False),
        (123, False),
    ])
    def test_message_content(self, content, valid):
        is_valid, error = validate_message_content(content, 1000)
        assert is_valid is valid
        assert bool(error) is not valid

    def test_preview(self):
        assert preview("short", 50) == "short"
        assert preview("a" * 50, 50) == "a" * 50
        assert preview("a" * 51, 50) == "a" * 50 + "..."

    def test_password(self):
        assert validate_password("123456") == (True, "")
        assert validate_password("12345")[0] is False
        assert validate_password("")[0] is False


class TestSecurity:

    def test_token_carries_subject_and_role(self):
        token = create_access_token("user-1", Role.ENTREPRENEUR)
        payload = decode_access_token(token)
        assert payload["sub"] == "user-1"
        assert payload["role"] == "entrepreneur"

    def test_expired_token(self):
        token = create_access_token("user-1", Role.INVESTOR, expires_delta=timedelta(seconds=-5))
        assert decode_access_token(token) is None

    def test_tampered_token(self):
        token = create_access_token("user-1", Role.INVESTOR)
        assert decode_access_token(token[:-2] + "xx") is None

    def test_password_hash(self):
        hashed = get_password_hash("hunter22")
        assert verify_password("hunter22", hashed)
        assert not verify_password("hunter23", hashed)


class TestSettings:

    @pytest.mark.parametrize("url,expected", [
        ("postgres://u:p@h:5432/db", "postgresql+asyncpg://u:p@h:5432/db"),
        ("postgresql://u:p@h:5432/db", "postgresql+asyncpg://u:p@h:5432/db"),
        ("sqlite+aiosqlite://", "sqlite+aiosqlite://"),
    ])
    def test_database_url_rewrite(self, url, expected):
        assert Settings(DATABASE_URL=url, JWT_SECRET_KEY="x").database_url == expected

    @pytest.mark.parametrize("url,expected", [
        ("postgres://u:p@h:5432/db", "postgresql://u:p@h:5432/db"),
        ("postgresql+asyncpg://u:p@h:5432/db", "postgresql://u:p@h:5432/db"),
        ("sqlite+aiosqlite:///nexus.db", "sqlite:///nexus.db"),
    ])
    def test_migrations_get_a_blocking_driver(self, url, expected):
        assert Settings(DATABASE_URL=url, JWT_SECRET_KEY="x").sync_database_url == expected

    def test_database_url_from_parts(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        settings = Settings(
            JWT_SECRET_KEY="x", DB_USER="nexus", DB_PASSWORD="pw", DB_HOST="db", DB_PORT="6543", DB_NAME="Nexus"
        )
        assert settings.database_url == "postgresql+asyncpg://nexus:pw@db:6543/Nexus"
        assert settings.sync_database_url == "postgresql://nexus:pw@db:6543/Nexus"

    def test_cors_origins_split(self):
        settings = Settings(JWT_SECRET_KEY="x", CORS_ORIGINS="http://a.test, http://b.test")
        assert settings.CORS_ORIGINS == ["http://a.test", "http://b.test"]


def test_only_pending_is_non_terminal():
    assert not RequestStatus.PENDING.is_terminal
    assert RequestStatus.ACCEPTED.is_terminal
    assert RequestStatus.REJECTED.is_terminal
