"""
LinguaHub Backend — Document Store Session Management
=======================================================

What:  The DocumentStore client (async SQLAlchemy engine + session factory),
       the declarative Base, and the FastAPI dependencies that hand a
       per-request session to route handlers.
Why:   Centralizes all database connection logic in one place.
How:   A DocumentStore is constructed once in the application lifespan and
       kept on app.state; get_db_session() opens a session from it for each
       request, commits on success and rolls back on error.
Who:   Used by route handlers via FastAPI's dependency injection system.

Architecture Decision:
    Collections (users, packages, bundles, exam histories, FAQs) are tables
    whose payload lives in a JSON column (JSONB on PostgreSQL). Lookup keys
    that must be unique (user email, exam-history student_id) are real
    columns with unique indexes, so the store (not a pre-check) decides
    duplicates.

    There is no module-level engine: every handler reaches the store through
    request.app.state, which keeps tests free to build isolated stores.
"""

import logging
from typing import AsyncGenerator, Optional

from fastapi import Request
from sqlalchemy import JSON, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from app.config import Settings

logger = logging.getLogger(__name__)


# What: JSON on every backend, JSONB where PostgreSQL is available
DocumentJSON = JSON().with_variant(JSONB(), "postgresql")


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    All models share this metadata, which Alembic reads for migrations and
    DocumentStore.create_schema() uses for test databases.
    """
    pass


class DocumentStore:
    """
    Process-wide client for the document store.

    Owns the connection pool; hands out sessions. Built during startup,
    disposed during shutdown.
    """

    def __init__(
        self,
        database_url: str,
        pool_size: int = 10,
        max_overflow: int = 10,
        pool_pre_ping: bool = True,
        echo: bool = False,
    ):
        engine_kwargs = {"echo": echo}
        # SQLite (tests, local dev) uses a single-connection pool without sizing
        if not database_url.startswith("sqlite"):
            engine_kwargs.update(
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_pre_ping=pool_pre_ping,
                pool_recycle=3600,
            )

        self.database_url = database_url
        self.engine: AsyncEngine = create_async_engine(database_url, **engine_kwargs)

        # expire_on_commit=False: response building reads attributes after commit
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "DocumentStore":
        return cls(
            settings.database_url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            echo=settings.log_level == "DEBUG",
        )

    async def create_schema(self) -> None:
        """
        Create all tables directly from model metadata.

        Production schemas are managed by Alembic; this is for SQLite test
        databases and throwaway local setups.
        """
        # Import models so they register with Base.metadata
        import app.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def ping(self) -> bool:
        """Lightweight connectivity probe used by the health check."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning("Document store unreachable: %s", str(e))
            return False

    async def dispose(self) -> None:
        """Gracefully closes all connections in the pool."""
        await self.engine.dispose()


# ── Dependencies ──────────────────────────────────────────────────────────
def get_store(request: Request) -> DocumentStore:
    """FastAPI dependency returning the store built during startup."""
    store: Optional[DocumentStore] = getattr(request.app.state, "store", None)
    if store is None:
        raise RuntimeError("DocumentStore is not initialized; was the lifespan skipped?")
    return store


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the store's factory
        2. Yields it to the route handler
        3. On success: commits the transaction
        4. On error: rolls back the transaction
        5. Always: closes the session (returns connection to pool)
    """
    store = get_store(request)
    async with store.session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
