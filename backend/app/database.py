"""
Coleta Backend — Database Session Management
==============================================

What:  Async SQLAlchemy engine construction, session factory, and FastAPI dependency.
Why:   Centralizes all database connection logic in one place.
How:   The application factory builds ONE engine per app instance and keeps it on
       `app.state`; each request borrows a session from the factory stored there.
       The session auto-commits on success and auto-rolls-back on error.
Who:   Used by route handlers via FastAPI's dependency injection system.
When:  Engine is created by create_app(); sessions are created per-request.

Why no module-level engine:
    The engine is handed to the app explicitly (create_app(engine=...)), so tests
    can inject an in-memory SQLite engine and production gets a pooled asyncpg
    engine, without either touching a global.
"""

from typing import AsyncGenerator, Optional

from fastapi import Request
from sqlalchemy import BigInteger, Integer
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from app.config import Settings


# Integer identities are BIGINT on PostgreSQL; SQLite only autoincrements
# columns declared exactly as INTEGER PRIMARY KEY.
BigIntId = BigInteger().with_variant(Integer, "sqlite")


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    All models inherit from this class so they share one metadata object,
    which Alembic reads for --autogenerate.
    """
    pass


# ── Engine Construction ───────────────────────────────────────────────────
def build_engine(settings: Settings, url: Optional[str] = None) -> AsyncEngine:
    """
    Create the async engine for the configured database.

    Pool sizing only applies to server databases; SQLite (used in tests and
    local experiments) keeps SQLAlchemy's default pool.
    """
    database_url = url or settings.database_url
    kwargs = {"echo": settings.log_level == "DEBUG"}
    if not database_url.startswith("sqlite"):
        kwargs.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,  # Recycle after 1 hour to prevent stale connections
        )
    return create_async_engine(database_url, **kwargs)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Session factory bound to `engine`.

    expire_on_commit=False: response DTOs are built from ORM objects after the
    flush; expiring them would trigger lazy loads outside the async context.
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory on app.state
        2. Yields it to the route handler
        3. On success: commits the transaction
        4. On error: rolls back the transaction
        5. Always: closes the session (returns connection to pool)

    Each handler issues independent, sequential statements; this commit is the
    only transaction boundary, so a failed request leaves nothing behind.
    """
    session_factory: async_sessionmaker[AsyncSession] = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
