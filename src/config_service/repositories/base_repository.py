"""
Base repository class providing common database operations.

Repositories wrap SQLAlchemy's AsyncSession and expose small, typed
operations. They `flush()` but never `commit()`: the caller (service layer)
owns the transaction, so several repository calls can succeed or fail as one
unit.

    async with db_error_handler(db, "Application"):
        app = await app_repo.create(id=..., name=...)
        await config_repo.create_default(app.id)
        await db.commit()
"""
import time
import logging
from typing import TypeVar, Generic, Type, Any

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from config_service.database.base import Base
from config_service.exceptions.base import RepositoryError
from config_service.exceptions.mapper import db_error_handler

# Type variable for the model class
ModelType = TypeVar("ModelType", bound=Base)

logger = logging.getLogger(__name__)


class BaseRepository(Generic[ModelType]):
    """
    Generic base repository providing common CRUD operations.

    Type Parameters:
        ModelType: The SQLAlchemy model class this repository manages.
    """

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        """
        Args:
            model: The SQLAlchemy model class (not an instance), used to build queries.
            db: The async database session, injected by the caller.
        """
        self.model = model
        self.db = db

    @property
    def model_name(self) -> str:
        return self.model.__name__

    # =================================================================================================================
    # Create
    # =================================================================================================================

    async def create(self, **kwargs) -> ModelType:
        """
        Insert an entity and return it with server-generated fields loaded.

        - flush() sends the INSERT inside the current transaction (no commit).
        - refresh() reloads DB defaults such as created_at / updated_at.

        Raises:
            DuplicateError: a unique constraint rejected the row.
            InternalError: any other failure (the session is rolled back).
        """
        logger.debug(
            "repo.create.start",
            extra={
                "model": self.model_name,
                "operation": "create",
                # keys only, values may be large or sensitive
                "provided_keys": sorted(kwargs.keys()),
            },
        )

        start = time.perf_counter()

        async with db_error_handler(self.db, self.model_name):
            entity = self.model(**kwargs)
            self.db.add(entity)
            await self.db.flush()
            await self.db.refresh(entity)

        duration_ms = int((time.perf_counter() - start) * 1000)
        logger.info(
            "repo.create.success",
            extra={
                "model": self.model_name,
                "operation": "create",
                "entity_id": self._identity_of(entity),
                "duration_ms": duration_ms,
            },
        )
        return entity

    # =================================================================================================================
    # Read
    # =================================================================================================================

    async def get_by_id(self, entity_id: Any) -> ModelType | None:
        """
        Get an entity by primary key, or None if it does not exist.

        Raises:
            RepositoryError: If the query fails.
        """
        try:
            entity = await self.db.get(self.model, entity_id)
            logger.debug(f"Retrieved {self.model_name} by ID: {entity_id}")
            return entity
        except Exception as e:
            logger.error(f"Error retrieving {self.model_name} by ID {entity_id}: {e}")
            raise RepositoryError(f"Failed to retrieve {self.model_name}") from e

    async def find_by_field(self, field: str, value: Any) -> ModelType | None:
        """
        Find a single entity by any mapped field.

        Raises:
            RepositoryError: If the field does not exist on the model or the query fails.
        """
        if not hasattr(self.model, field):
            raise RepositoryError(f"{self.model_name} has no field '{field}'")

        try:
            result = await self.db.execute(select(self.model).where(getattr(self.model, field) == value))
            entity = result.scalar_one_or_none()
            logger.debug(f"Found {self.model_name} by {field}")
            return entity
        except Exception as e:
            logger.error(f"Error finding {self.model_name} by {field}: {e}")
            raise RepositoryError(f"Failed to find {self.model_name}") from e

    async def get_all(self, order_by: str | None = None) -> list[ModelType]:
        """
        Get all entities, optionally ordered (ascending) by a field.

        Without `order_by` the default is `created_at` descending when the model has it.
        Unknown `order_by` fields are ignored with a warning.

        Returns:
            A list of model instances (empty if none found).
        """
        try:
            query = select(self.model)

            if order_by:
                if hasattr(self.model, order_by):
                    query = query.order_by(getattr(self.model, order_by))
                    logger.debug(f"Ordering {self.model_name} by field: '{order_by}'")
                else:
                    logger.warning(
                        f"Ignored invalid 'order_by' field: '{order_by}' does not exist on {self.model_name}")
            elif hasattr(self.model, "created_at"):
                query = query.order_by(self.model.created_at.desc())

            result = await self.db.execute(query)
            entities = list(result.scalars().all())

            logger.debug(f"Retrieved {len(entities)} {self.model_name} entities")
            return entities

        except Exception as e:
            logger.error(f"Error retrieving all {self.model_name}: {e}")
            raise RepositoryError(f"Failed to retrieve {self.model_name} entities") from e

    async def count(self, **filters: Any) -> int:
        """
        Count entities matching equality filters. Unknown fields and None values are skipped.
        """
        try:
            query = select(func.count()).select_from(self.model)
            for field, value in filters.items():
                if hasattr(self.model, field) and value is not None:
                    query = query.where(getattr(self.model, field) == value)

            result = await self.db.execute(query)
            count = result.scalar() or 0
            logger.debug(f"Counted {count} {self.model_name} entities")
            return count

        except Exception as e:
            logger.error(f"Error counting {self.model_name}: {e}")
            raise RepositoryError(f"Failed to count {self.model_name} entities") from e

    # =================================================================================================================
    # Helpers
    # =================================================================================================================

    def _identity_of(self, entity: ModelType) -> Any:
        identity = self.model.__mapper__.primary_key_from_instance(entity)
        return identity[0] if len(identity) == 1 else identity
