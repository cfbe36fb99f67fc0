import logging

from sqlalchemy.ext.asyncio import AsyncSession

from config_service.models.configuration import Configuration, DEFAULT_CONFIG_DATA
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class ConfigurationRepository(BaseRepository[Configuration]):
    """Data access for the `configurations` table (one row per application)."""

    def __init__(self, db: AsyncSession):
        super().__init__(Configuration, db)

    async def create_default(self, application_id: str) -> Configuration:
        """Seed the empty configuration document for a new application."""
        return await self.create(application_id=application_id, config_data=DEFAULT_CONFIG_DATA)

