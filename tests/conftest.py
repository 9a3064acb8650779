"""
LinguaHub Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
Why:   Provides reusable test infrastructure (real SQLite store, API client,
       temp storage, sample uploads).
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped, fresh per test):
    ├── temp_storage: Temporary directory for uploaded files
    ├── test_settings: Settings pointing at a per-test SQLite file
    ├── store: DocumentStore with all tables created
    ├── file_service: FileService rooted in temp_storage
    ├── seed: Helper that inserts documents directly through the store
    ├── mock_db_session: AsyncMock session for failure-injection unit tests
    └── test_client: HTTPX AsyncClient wired to a fresh app
"""

import os
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport


# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Set BEFORE app imports so the module-level default Settings never points
# at a real database or real credentials
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["ADMIN_EMAIL"] = "admin@linguahub.test"
os.environ["ADMIN_PASSWORD"] = "admin-pass-123"
os.environ["LOG_LEVEL"] = "WARNING"

from app.config import Settings  # noqa: E402
from app.database import DocumentStore  # noqa: E402
from app.services.file_service import FileService  # noqa: E402

ADMIN_EMAIL = "admin@linguahub.test"
ADMIN_PASSWORD = "admin-pass-123"


@pytest.fixture
def temp_storage(tmp_path):
    storage_dir = tmp_path / "storage"
    storage_dir.mkdir()
    return str(storage_dir)


@pytest.fixture
def test_settings(tmp_path, temp_storage):
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        storage_root=temp_storage,
        admin_email=ADMIN_EMAIL,
        admin_password=ADMIN_PASSWORD,
        log_level="WARNING",
        rate_limit_requests=10000,
    )


@pytest_asyncio.fixture
async def store(test_settings):
    """A real document store on a throwaway SQLite file."""
    document_store = DocumentStore(test_settings.database_url)
    await document_store.create_schema()
    yield document_store
    await document_store.dispose()


@pytest.fixture
def file_service(temp_storage):
    return FileService(storage_root=temp_storage)


@pytest.fixture
def seed(store):
    """
    Insert ORM objects directly, bypassing the API.

    Usage:
        await seed(Bundle(document={"title": "Starter"}))
    """

    async def _seed(*objects: Any) -> None:
        async with store.session_factory() as session:
            session.add_all(objects)
            await session.commit()

    return _seed


@pytest.fixture
def mock_db_session():
    """
    A MagicMock that simulates AsyncSession behavior for unit tests that
    need to inject driver failures.
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def sample_image_bytes():
    """Minimal JPEG bytes: SOI marker + JFIF header + EOI marker."""
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )


@pytest.fixture
def sample_audio_bytes():
    """An ID3 header followed by padding; enough to look like an mp3 upload."""
    return b"ID3\x04\x00\x00\x00\x00\x00\x00" + b"\x00" * 64


@pytest.fixture
def registration_form():
    return {
        "name": "Ana Souza",
        "phone": "+55 11 91234-5678",
        "email": "ana@example.com",
        "dateOfBirth": "1998-04-12",
        "address": "Rua das Flores 10, São Paulo",
        "gender": "female",
        "password": "correct horse battery",
        "confirm_password": "correct horse battery",
    }


@pytest_asyncio.fixture
async def test_client(test_settings, store, file_service):
    """
    HTTPX AsyncClient routed directly into a fresh app.

    ASGITransport does not run the lifespan, so the store and file service
    are attached to app.state here.
    """
    from app.main import create_app

    app = create_app(test_settings)
    app.state.store = store
    app.state.file_service = file_service

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
