"""Pytest configuration and fixtures."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.domain.services.directory_service import DirectoryService
from app.infrastructure.photo_storage import LocalPhotoStorage
from app.persistence.database import Base
from app.persistence.models import *  # noqa: F401, F403
from app.persistence.repositories.contact_repository import ContactRepository


@pytest.fixture
async def db_session():
    """Create a test database session."""
    # Use in-memory SQLite for testing
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def upload_dir(tmp_path):
    """Upload root for photos (not created until first save)."""
    return tmp_path / "uploads" / "photos"


@pytest.fixture
def photo_storage(upload_dir):
    """Create a photo storage rooted in a temp directory."""
    return LocalPhotoStorage(upload_dir)


@pytest.fixture
def contact_repo(db_session):
    """Create a contact repository on the test session."""
    return ContactRepository(db_session)


@pytest.fixture
def directory_service(contact_repo, photo_storage):
    """Create a directory service over the test store and photo storage."""
    return DirectoryService(contact_repo, photo_storage)


@pytest.fixture
async def client(db_session, photo_storage):
    """Create a test HTTP client for the FastAPI app."""
    from httpx import ASGITransport, AsyncClient

    from app.api.deps import get_photo_store
    from app.main import app
    from app.persistence.database import get_db

    async def _get_db():
        yield db_session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_photo_store] = lambda: photo_storage

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as test_client:
        yield test_client

    app.dependency_overrides.clear()
