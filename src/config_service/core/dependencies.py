from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from config_service.database.session import get_async_session
from config_service.services.application_service import ApplicationService


async def get_application_service(db: AsyncSession = Depends(get_async_session)) -> ApplicationService:
    return ApplicationService(db)
