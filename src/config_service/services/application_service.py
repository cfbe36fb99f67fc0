"""
Write path for applications.

`ApplicationService.create_application()` persists an Application and its
default Configuration as one unit of work:

    1. draw a ULID for the new application
    2. normalise the description (blank -> None)
    3. INSERT applications, INSERT configurations ('{}'), COMMIT
    4. on any failure: ROLLBACK (neither row survives) and raise a classified error

Classification of a failed write:

| Store signal                                  | Raised                          | HTTP |
| --------------------------------------------- | ------------------------------- | ---- |
| uniqueness violation on applications.name     | ApplicationNameConflictError    | 409  |
| any other uniqueness violation (e.g. id)      | InternalError                   | 500  |
| anything else (FK, connectivity, driver, ...) | InternalError                   | 500  |
"""
import logging
from typing import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from config_service.exceptions.base import (
    ApplicationNameConflictError,
    DuplicateError,
    InternalError,
    ServiceError,
    ValidationFailedError,
)
from config_service.exceptions.integrity_classifier import is_unique_violation
from config_service.exceptions.mapper import db_error_handler
from config_service.models import Application
from config_service.repositories import ApplicationRepository, ConfigurationRepository
from config_service.utils.ulid import new_ulid
from config_service.validators.application_validators import validate_create_application

logger = logging.getLogger(__name__)

# uq_ is set by the naming convention in database/base.py; IX_ is how an index-backed
# uniqueness (SQL Server 2601) on the same column is usually named.
NAME_UNIQUE_CONSTRAINTS = ("uq_applications_name", "ix_applications_name")


def normalize_description(description: str | None) -> str | None:
    """Blank or whitespace-only descriptions are stored as NULL."""
    if description is None or not description.strip():
        return None
    return description


class ApplicationService:
    """
    Orchestrates application reads and the transactional create.

    Args:
        db: the session this service works in. The service commits/rolls back it.
        id_generator: callable returning a new 26-character ULID.
    """

    def __init__(self, db: AsyncSession, *, id_generator: Callable[[], str] = new_ulid):
        self.db = db
        self.id_generator = id_generator
        self.applications = ApplicationRepository(db)
        self.configurations = ConfigurationRepository(db)

    async def list_applications(self) -> list[Application]:
        try:
            return await self.applications.list_ordered_by_name()
        except ServiceError as exc:
            logger.error("service.list_applications.failed", extra={"error": str(exc)}, exc_info=exc)
            raise InternalError("An error occurred while retrieving applications") from exc

    async def create_application(self, name: str, description: str | None = None) -> Application:
        """
        Validate, then persist the application and its default configuration atomically.

        Raises:
            ValidationFailedError: the request breaks a validation rule (no I/O happened).
            ApplicationNameConflictError: the name is already taken.
            InternalError: anything else; the transaction was rolled back.
        """
        issues = validate_create_application(name, description)
        if issues:
            logger.info("service.create_application.invalid",
                        extra={"fields": sorted({i.field for i in issues})})
            raise ValidationFailedError(issues)

        application_id = self.id_generator()
        description = normalize_description(description)

        try:
            async with db_error_handler(self.db, "Application"):
                application = await self.applications.create_application(
                    id=application_id, name=name, description=description
                )
                await self.configurations.create_default(application.id)
                await self.db.commit()
        except DuplicateError as exc:
            if is_unique_violation(exc.__cause__, columns=("name",), constraints=NAME_UNIQUE_CONSTRAINTS):
                logger.warning("service.create_application.name_conflict",
                               extra={"application_name": name, "constraint": exc.constraint})
                raise ApplicationNameConflictError(name, constraint=exc.constraint) from exc
            logger.error("service.create_application.unexpected_duplicate",
                         extra={"application_id": application_id, "fields": exc.fields,
                                "constraint": exc.constraint}, exc_info=exc)
            raise InternalError("An error occurred while creating the application") from exc
        except ServiceError as exc:
            logger.error("service.create_application.failed",
                         extra={"application_id": application_id, "error": str(exc)}, exc_info=exc)
            raise InternalError("An error occurred while creating the application") from exc

        logger.info("service.create_application.success",
                    extra={"application_id": application.id, "application_name": application.name})
        return application

