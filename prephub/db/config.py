"""Database configuration and session management.

``DATABASE_URL`` selects the backend; without it a SQLite file next to the
project root is used. ``build_engine`` holds the per-backend engine options so
the service, Alembic and the test suite open connections the same way.
"""
from __future__ import annotations
import os
import pathlib
from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    create_async_engine,
    async_sessionmaker,
)

project_dir = pathlib.Path(__file__).parent.parent.parent
DEFAULT_SQLITE_URL = f"sqlite+aiosqlite:///{project_dir / 'dev.db'}"
DATABASE_URL = os.getenv("DATABASE_URL", DEFAULT_SQLITE_URL)
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() == "true"
# Seconds a SQLite writer waits on a competing transaction before failing
SQLITE_BUSY_TIMEOUT = float(os.getenv("SQLITE_BUSY_TIMEOUT", "5"))


def build_engine(url: str = DATABASE_URL, **kwargs) -> AsyncEngine:
    options = {"echo": SQL_ECHO}
    if url.startswith("sqlite"):
        options["connect_args"] = {"timeout": SQLITE_BUSY_TIMEOUT}
    else:
        options["pool_pre_ping"] = True
    options.update(kwargs)
    return create_async_engine(url, **options)


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Records stay readable after commit; routers serialize them post-commit.
    return async_sessionmaker(
        bind=bind,
        class_=AsyncSession,
        expire_on_commit=False,
    )


engine = build_engine()
SessionLocal = build_session_factory(engine)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency that yields an async DB session."""
    async with SessionLocal() as session:
        try:
            yield session
        finally:
            if session.in_transaction():
                await session.rollback()
