import logging

from sqlalchemy.ext.asyncio import AsyncSession

from config_service.models.application import Application
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class ApplicationRepository(BaseRepository[Application]):
    """Data access for the `applications` table."""

    def __init__(self, db: AsyncSession):
        super().__init__(Application, db)

    async def list_ordered_by_name(self) -> list[Application]:
        """All applications, ascending by name. Empty list when there are none."""
        return await self.get_all(order_by="name")

    async def find_by_name(self, name: str) -> Application | None:
        return await self.find_by_field("name", name)

    async def create_application(self, *, id: str, name: str, description: str | None) -> Application:
        return await self.create(id=id, name=name, description=description)
