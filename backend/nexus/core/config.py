"""
Configuration settings for the application.
"""
import logging
from pathlib import Path
from typing import Any, List, Optional, Union

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator

logger = logging.getLogger(__name__)

# Load environment variables from .env file if it exists
# Note: the file is looked up at the backend root (next to main.py)
env_path = Path(__file__).resolve().parent.parent.parent / ".env"

if env_path.exists():
    load_dotenv(dotenv_path=env_path)
    logger.debug(f"[ENV] Loaded .env from: {env_path}")
else:
    logger.debug(f"[ENV] .env file not found at: {env_path}, using process environment")


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    """
    # API configuration
    API_PORT: int = Field(default=5000)
    API_HOST: str = Field(default="0.0.0.0")

    # Database configuration
    DATABASE_URL: Optional[str] = Field(default=None)
    DB_HOST: str = Field(default="localhost")
    DB_PORT: str = Field(default="5432")
    DB_USER: str = Field(default="nexus")
    DB_PASSWORD: str = Field(default="")
    DB_NAME: str = Field(default="BusinessNexus")
    AUTO_CREATE_TABLES: bool = Field(default=False)

    # CORS configuration
    CORS_ORIGINS: Union[str, List[str]] = Field(default="*")

    # JWT configuration
    JWT_SECRET_KEY: str = Field(...)
    JWT_ALGORITHM: str = Field(default="HS256")
    JWT_EXPIRATION_MINUTES: int = Field(default=60 * 24 * 7)  # 7 days

    # Messaging limits
    MESSAGE_MAX_LENGTH: int = Field(default=1000)
    REQUEST_MESSAGE_MIN_LENGTH: int = Field(default=10)
    NOTIFICATION_PREVIEW_LENGTH: int = Field(default=50)

    # Logging
    LOG_LEVEL: str = Field(default="INFO")

    @field_validator("CORS_ORIGINS", mode="before")
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> Union[List[str], str]:
        """
        Parse a comma-separated string into a list of CORS origins.
        """
        if isinstance(v, str) and v != "*":
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @property
    def database_url(self) -> str:
        """
        SQLAlchemy async URL.

        DATABASE_URL wins when set (Railway, Heroku, etc.); postgres URLs are
        rewritten to the asyncpg driver. Otherwise the URL is assembled from DB_*.
        """
        url = self.DATABASE_URL
        if url:
            if url.startswith("postgres://"):
                return url.replace("postgres://", "postgresql+asyncpg://", 1)
            if url.startswith("postgresql://"):
                return url.replace("postgresql://", "postgresql+asyncpg://", 1)
            return url

        return (
            f"postgresql+asyncpg://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )

    @property
    def sync_database_url(self) -> str:
        """Synchronous variant of database_url, used by Alembic."""
        return self.database_url.replace("postgresql+asyncpg://", "postgresql://", 1).replace(
            "sqlite+aiosqlite://", "sqlite://", 1
        )

    # Ignore extra fields from environment
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")


# Create settings object
settings = Settings()
