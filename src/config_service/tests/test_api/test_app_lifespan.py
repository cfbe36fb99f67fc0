from starlette.testclient import TestClient

from config_service.config import Settings
from config_service.main import create_app


def test_lifespan_wires_database(tmp_path):
    """
    Full app with its own engine: lifespan creates the tables, requests go
    through the real session dependency, shutdown disposes the engine.
    """
    settings = Settings(
        ENV="testing",
        LOG_FORMAT="text",
        SQLALCHEMY_DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'lifespan.db'}",
        DB_CREATE_TABLES=True,
    )
    app = create_app(settings)

    with TestClient(app) as client:
        assert app.state.engine is not None

        created = client.post("/api/v1/applications", json={"name": "billing"})
        listed = client.get("/api/v1/applications")

    assert created.status_code == 201
    assert [item["name"] for item in listed.json()] == ["billing"]


def test_custom_prefix(tmp_path):
    settings = Settings(
        ENV="testing",
        LOG_FORMAT="text",
        API_V1_PREFIX="/v1",
        SQLALCHEMY_DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'prefix.db'}",
        DB_CREATE_TABLES=True,
    )

    with TestClient(create_app(settings)) as client:
        assert client.get("/v1/applications").json() == []
        assert client.get("/api/v1/applications").status_code == 404


def test_import_builds_no_app():
    """The module only exposes the factory; logging is untouched until create_app() runs."""
    import config_service.main as main_module

    assert not hasattr(main_module, "app")
    assert callable(main_module.create_app)
