"""
Core pytest configuration for the entire test suite.

Only the database setup and cross-cutting fixtures live here. Domain fixtures are in:
- tests/test_fixtures/repository_fixtures.py
- tests/test_fixtures/service_fixtures.py
- tests/test_fixtures/api_fixtures.py

Database selection (first match wins):
1. `TEST_DATABASE_URL` environment variable (CI: a disposable Postgres database)
2. the app's DATABASE_URL when `TESTING=true` and `TEST_POSTGRES_DB` are set
3. a throwaway SQLite file per test (aiosqlite), no server needed
"""

from __future__ import annotations

import os
import logging
from typing import AsyncGenerator

# Quiet third-party loggers before anything else imports them.
NOISY_LOGGERS = (
    "sqlalchemy",
    "sqlalchemy.engine",
    "sqlalchemy.engine.Engine",
    "asyncio",
    "httpx",
    "aiosqlite",
)
for _name in NOISY_LOGGERS:
    logging.getLogger(_name).setLevel(logging.WARNING)

import pytest
from pytest import FixtureRequest
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from config_service.config import Settings, get_settings
from config_service.core.logging.builder import setup_logging, stop_queue_logging
from config_service.database.base import Base
from config_service import models  # noqa: F401 - registers tables with Base.metadata
from config_service.utils.logging import safe_log_db_url

settings = get_settings()
logger = logging.getLogger(__name__)


@pytest.fixture(scope="session", autouse=True)
def configure_logging(request: FixtureRequest):
    """
    Install the application logging config for the session, then hand pytest's
    capture handler back to the root logger (dictConfig replaces root handlers).
    """
    setup_logging(Settings(ENV="testing", LOG_FORMAT="text", LOG_LEVEL="DEBUG"))

    caplog_plugin = request.config.pluginmanager.getplugin("logging-plugin")
    handler = getattr(caplog_plugin, "caplog_handler", None)
    if handler is not None:
        logging.getLogger().addHandler(handler)

    yield

    stop_queue_logging()


def get_test_database_url(tmp_path) -> str:
    if test_url := os.getenv("TEST_DATABASE_URL"):
        return test_url

    if settings.TESTING and settings.TEST_POSTGRES_DB:
        return settings.DATABASE_URL

    return f"sqlite+aiosqlite:///{tmp_path / 'test_config_service.db'}"


@pytest.fixture()
async def async_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """Fresh schema per test; dropped again afterwards."""
    url = get_test_database_url(tmp_path)
    logger.debug("Using test DB: %s", safe_log_db_url(url))

    engine = create_async_engine(url, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture()
def session_factory(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Same factory shape the app uses (expire_on_commit=False)."""
    return async_sessionmaker(bind=async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture()
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """
    Session used by the code under test. Services commit for real; isolation
    comes from the per-test schema in `async_engine`.
    """
    async with session_factory() as session:
        yield session


@pytest.fixture()
async def verify_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """A second, independent session for asserting what was actually committed."""
    async with session_factory() as session:
        yield session


from config_service.tests.test_fixtures.repository_fixtures import (  # noqa: E402
    application_repository,
    configuration_repository,
    create_application_row,
)
from config_service.tests.test_fixtures.service_fixtures import (  # noqa: E402
    application_service,
    count_rows,
)
from config_service.tests.test_fixtures.api_fixtures import (  # noqa: E402
    app,
    client,
)
