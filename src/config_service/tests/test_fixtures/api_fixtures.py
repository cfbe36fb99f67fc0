"""
Fixtures for API tests.

httpx's ASGITransport does not run the lifespan, so the app gets its session
dependency overridden with the per-test sessionmaker from conftest.py.
"""

import httpx
import pytest
from fastapi import FastAPI

from config_service.config import Settings
from config_service.database.session import get_async_session
from config_service.main import create_app


@pytest.fixture
def app(session_factory) -> FastAPI:
    application = create_app(Settings(ENV="testing", LOG_FORMAT="text", LOG_LEVEL="DEBUG"))

    async def _override_get_async_session():
        async with session_factory() as session:
            yield session

    application.dependency_overrides[get_async_session] = _override_get_async_session
    return application


@pytest.fixture
async def client(app: FastAPI):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac
