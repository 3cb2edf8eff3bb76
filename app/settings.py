"""Application settings using Pydantic BaseSettings."""

import os
import re

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Contact store
    database_url: str = "sqlite+aiosqlite:///./contacts.db"

    # Photo storage
    upload_dir: str = "uploads/photos"
    max_photo_size_bytes: int = 5 * 1024 * 1024  # 5 MB

    # Pagination
    default_page_size: int = 10
    max_page_size: int = 100

    # CORS (frontend dev servers)
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Application
    environment: str = "development"
    log_level: str = "INFO"
    api_v1_prefix: str = "/api/v1"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()


def get_async_database_url() -> str:
    """Get database URL converted for an async driver."""
    url = os.environ.get("DATABASE_URL") or settings.database_url
    # Convert postgres:// to postgresql+asyncpg:// for SQLAlchemy async
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql+asyncpg://", 1)
    elif url.startswith("postgresql://") and "+asyncpg" not in url:
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
    # asyncpg doesn't support sslmode, it uses ssl parameter
    if "sslmode=" in url:
        url = re.sub(r'[?&]sslmode=[^&]*', '', url)
        # Clean up any leftover ? or & at the end
        url = url.rstrip('?&')
    return url
