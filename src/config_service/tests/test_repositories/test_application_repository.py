import pytest

from config_service.exceptions.base import DuplicateError
from config_service.models import DEFAULT_CONFIG_DATA
from config_service.utils.ulid import new_ulid


@pytest.mark.asyncio
class TestApplicationRepository:

    async def test_list_ordered_by_name(self, application_repository, create_application_row):
        for name in ("zebra", "alpha", "middle"):
            await create_application_row(name=name)

        applications = await application_repository.list_ordered_by_name()

        assert [a.name for a in applications] == ["alpha", "middle", "zebra"]

    async def test_list_mixed_case(self, application_repository, create_application_row):
        await create_application_row(name="beta")
        await create_application_row(name="Alpha")

        names = [a.name for a in await application_repository.list_ordered_by_name()]

        assert names == ["Alpha", "beta"]

    async def test_find_by_name(self, application_repository, create_application_row):
        await create_application_row(name="billing", description="Invoices")

        found = await application_repository.find_by_name("billing")

        assert found is not None
        assert found.description == "Invoices"

    async def test_create_application_keeps_given_id(self, application_repository):
        application_id = new_ulid()

        application = await application_repository.create_application(
            id=application_id, name="billing", description=None
        )

        assert application.id == application_id
        assert application.description is None

    async def test_duplicate_name(self, application_repository, create_application_row):
        await create_application_row(name="billing")

        with pytest.raises(DuplicateError) as exc_info:
            await application_repository.create_application(id=new_ulid(), name="billing", description=None)

        assert exc_info.value.fields == ["name"]


@pytest.mark.asyncio
class TestConfigurationRepository:

    async def test_create_default(self, configuration_repository, create_application_row, db_session):
        application = await create_application_row(name="billing")

        configuration = await configuration_repository.create_default(application.id)
        await db_session.commit()

        assert configuration.application_id == application.id
        assert configuration.config_data == DEFAULT_CONFIG_DATA == "{}"

