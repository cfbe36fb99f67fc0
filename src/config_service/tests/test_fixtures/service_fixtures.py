"""Fixtures for service tests."""

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from config_service.services import ApplicationService


@pytest.fixture
def application_service(db_session: AsyncSession) -> ApplicationService:
    return ApplicationService(db_session)


@pytest.fixture
def count_rows(verify_session: AsyncSession):
    """
    Count committed rows of a model from an independent session.

    Usage:
        assert await count_rows(Application) == 1
    """
    async def _count(model) -> int:
        result = await verify_session.execute(select(func.count()).select_from(model))
        # end the read transaction so the next call sees fresh data
        await verify_session.rollback()
        return result.scalar_one()

    return _count
