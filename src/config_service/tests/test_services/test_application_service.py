import pytest
from sqlalchemy.exc import IntegrityError

from config_service.exceptions.base import (
    ApplicationNameConflictError,
    InternalError,
    RepositoryError,
    ValidationFailedError,
)
from config_service.models import Application, Configuration
from config_service.repositories import ApplicationRepository, ConfigurationRepository
from config_service.services import ApplicationService, normalize_description
from config_service.utils.ulid import is_ulid, new_ulid


@pytest.mark.parametrize(
    "raw,expected",
    [(None, None), ("", None), ("   ", None), ("\t\n", None), ("Invoices", "Invoices"), (" padded ", " padded ")],
)
def test_normalize_description(raw, expected):
    assert normalize_description(raw) == expected


@pytest.mark.asyncio
class TestCreateApplication:

    async def test_creates_application_and_default_configuration(self, application_service, verify_session):
        """
        Behavior:
                - One call persists the application and its `{}` configuration.
                - Both rows are committed (visible from an independent session).
        """
        # Act
        application = await application_service.create_application("billing", "Invoices")

        # Assert
        assert is_ulid(application.id)
        assert application.name == "billing"
        assert application.description == "Invoices"

        stored = await verify_session.get(Application, application.id)
        configuration = await verify_session.get(Configuration, application.id)
        assert stored is not None and stored.name == "billing"
        assert configuration is not None
        assert configuration.config_data == "{}"

    async def test_blank_description_is_stored_as_null(self, application_service, verify_session):
        application = await application_service.create_application("billing", "   ")

        assert application.description is None
        assert (await verify_session.get(Application, application.id)).description is None

    async def test_uses_injected_id_generator(self, db_session):
        fixed_id = new_ulid()
        service = ApplicationService(db_session, id_generator=lambda: fixed_id)

        application = await service.create_application("billing")

        assert application.id == fixed_id

    async def test_validation_failure_touches_nothing(self, application_service, count_rows):
        with pytest.raises(ValidationFailedError) as exc_info:
            await application_service.create_application("bad name!", None)

        assert exc_info.value.http_status() == 422
        assert exc_info.value.details == (
            "Application name can only contain alphanumeric characters, underscores, and hyphens"
        )
        assert await count_rows(Application) == 0
        assert await count_rows(Configuration) == 0

    async def test_duplicate_name_is_a_conflict(self, application_service, count_rows):
        """
        Behavior:
                - The second create with the same name fails with ApplicationNameConflictError.
                - The existing application and its configuration are untouched.
        """
        # Arrange
        await application_service.create_application("billing")

        # Act & Assert
        with pytest.raises(ApplicationNameConflictError) as exc_info:
            await application_service.create_application("billing", "another one")

        err = exc_info.value
        assert err.http_status() == 409
        assert "billing" in err.details
        assert await count_rows(Application) == 1
        assert await count_rows(Configuration) == 1

    async def test_session_usable_after_conflict(self, application_service, count_rows):
        await application_service.create_application("billing")
        with pytest.raises(ApplicationNameConflictError):
            await application_service.create_application("billing")

        await application_service.create_application("shipping")

        assert await count_rows(Application) == 2

    async def test_configuration_failure_rolls_back_application(self, application_service, count_rows,
                                                                monkeypatch):
        """
        Behavior:
                - The application INSERT succeeds, the configuration INSERT fails.
                - Neither row survives and the caller gets an InternalError.
        """
        async def failing_create_default(self, application_id):
            raise RuntimeError("disk full")

        monkeypatch.setattr(ConfigurationRepository, "create_default", failing_create_default)

        with pytest.raises(InternalError) as exc_info:
            await application_service.create_application("billing")

        assert exc_info.value.http_status() == 500
        assert "disk full" not in exc_info.value.details
        assert await count_rows(Application) == 0
        assert await count_rows(Configuration) == 0

    async def test_id_collision_is_internal_not_conflict(self, db_session, count_rows):
        fixed_id = new_ulid()
        service = ApplicationService(db_session, id_generator=lambda: fixed_id)
        await service.create_application("billing")

        with pytest.raises(InternalError) as exc_info:
            await service.create_application("shipping")

        assert not isinstance(exc_info.value, ApplicationNameConflictError)
        assert await count_rows(Application) == 1


    @pytest.mark.parametrize(
        "index_name,expected",
        [
            ("IX_applications_name", ApplicationNameConflictError),
            ("ix_applications_name", ApplicationNameConflictError),
            ("IX_applications_legacy_code", InternalError),
        ],
    )
    async def test_sqlserver_unique_index_violation(self, application_service, count_rows, monkeypatch,
                                                    index_name, expected):
        """
        Behavior:
                - SQL Server reports a duplicate on a unique index (2601) by index name only.
                - The name index means a name conflict; any other index is an InternalError.
        """
        # Arrange
        message = (
            "('23000', \"[23000] [Microsoft][ODBC Driver 18 for SQL Server][SQL Server]"
            f"Cannot insert duplicate key row in object 'dbo.applications' with unique index '{index_name}'. "
            "The duplicate key value is (billing). (2601) (SQLExecDirectW)\")"
        )

        async def failing_create(self, **kwargs):
            raise IntegrityError("INSERT INTO applications ...", {}, Exception(message))

        monkeypatch.setattr(ApplicationRepository, "create_application", failing_create)

        # Act & Assert
        with pytest.raises(expected) as exc_info:
            await application_service.create_application("billing")

        assert type(exc_info.value) is expected
        assert await count_rows(Application) == 0


@pytest.mark.asyncio
class TestListApplications:

    async def test_empty(self, application_service):
        assert await application_service.list_applications() == []

    async def test_sorted_by_name(self, application_service):
        for name in ("zebra", "alpha", "middle"):
            await application_service.create_application(name)

        applications = await application_service.list_applications()

        assert [a.name for a in applications] == ["alpha", "middle", "zebra"]

    async def test_read_failure_becomes_internal_error(self, application_service, monkeypatch):
        async def failing_list(self):
            raise RepositoryError("Failed to retrieve Application entities")

        monkeypatch.setattr(ApplicationRepository, "list_ordered_by_name", failing_list)

        with pytest.raises(InternalError) as exc_info:
            await application_service.list_applications()

        assert exc_info.value.message == "An error occurred while retrieving applications"

