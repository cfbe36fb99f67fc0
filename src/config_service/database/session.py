"""
Engine and session factory construction.

Nothing here runs at import time: the app factory builds the engine from the
Settings it was given and keeps it on `app.state`, so the connection string is
an explicit dependency rather than a module global.
"""
from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from config_service.config.settings import Settings
from .base import Base


def create_engine_from_settings(settings: Settings) -> AsyncEngine:
    kwargs = {"echo": settings.SQLALCHEMY_ECHO}
    if not settings.DATABASE_URL.startswith("sqlite"):
        # Connection health checks; SQLite connections are local files.
        kwargs["pool_pre_ping"] = True
    return create_async_engine(settings.DATABASE_URL, **kwargs)


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False keeps attributes readable after commit() for response shaping
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


async def create_tables(engine: AsyncEngine) -> None:
    # Import models so they register with Base.metadata
    from config_service import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_async_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency. Yields a session bound to the app's engine and closes it after the request.

    Usage:
        async def endpoint(db: AsyncSession = Depends(get_async_session)):
            ...
    """
    maker: async_sessionmaker[AsyncSession] = request.app.state.sessionmaker
    async with maker() as session:
        yield session
