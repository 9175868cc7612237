"""
Application factory.

    app = create_app()              # settings from the environment
    app = create_app(settings)      # explicit settings (tests)

The storage handle is created here, opened when the app starts and disposed when
it stops; routes reach it through `app.state.database`.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from bookstore.api.v1 import books_router, register_exception_handlers
from bookstore.config.settings import Settings, get_settings
from bookstore.core.logging import RequestIDMiddleware, setup_logging
from bookstore.database.session import Database
from bookstore.utils.logging import get_project_name, get_project_version

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings)

    database = Database(settings.SQLALCHEMY_DATABASE_URL, echo=settings.SQLALCHEMY_ECHO)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database.connect()
        if settings.CREATE_TABLES_ON_STARTUP:
            await database.create_all()
        logger.info("app.startup", extra={"env": settings.ENV, "testing": settings.TESTING})
        try:
            yield
        finally:
            await database.dispose()
            logger.info("app.shutdown")

    app = FastAPI(title=get_project_name(), version=get_project_version(), lifespan=lifespan)
    app.state.settings = settings
    app.state.database = database

    app.add_middleware(RequestIDMiddleware)
    register_exception_handlers(app)

    app.include_router(books_router, prefix="/books", tags=["books"])

    @app.get("/health", tags=["health"])
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app
