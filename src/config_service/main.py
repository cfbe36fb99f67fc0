"""
FastAPI application entry point.

Usage:
    uvicorn --factory config_service.main:create_app --reload
or, with explicit settings (tests, scripts):
    app = create_app(Settings(SQLALCHEMY_DATABASE_URL="sqlite+aiosqlite:///./dev.db"))
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from config_service.api.v1 import api_router
from config_service.api.v1 import health
from config_service.api.v1.error_handlers import UnhandledExceptionMiddleware, register_exception_handlers
from config_service.config.settings import Settings, get_settings
from config_service.core.logging import RequestIDMiddleware, setup_logging
from config_service.core.logging.builder import stop_queue_logging
from config_service.database.session import create_engine_from_settings, create_sessionmaker, create_tables
from config_service.utils.logging import safe_log_db_url

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        engine = create_engine_from_settings(settings)
        app.state.engine = engine
        app.state.sessionmaker = create_sessionmaker(engine)
        logger.info("Starting %s (%s) with database %s",
                    settings.APP_NAME, settings.ENV, safe_log_db_url(settings.DATABASE_URL))

        if settings.DB_CREATE_TABLES:
            await create_tables(engine)
            logger.info("Database tables ensured")

        try:
            yield
        finally:
            logger.info("Shutting down %s", settings.APP_NAME)
            await engine.dispose()
            stop_queue_logging()

    app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
    app.state.settings = settings

    # last added is outermost: request id wraps the unhandled-exception catch
    app.add_middleware(UnhandledExceptionMiddleware)
    app.add_middleware(RequestIDMiddleware)
    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(api_router, prefix=settings.API_V1_PREFIX)

    return app

