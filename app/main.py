"""FastAPI application factory."""

from fastapi import FastAPI
from fastapi_pagination import add_pagination

from app.config import get_settings
from app.infra.logging_config import LoggingConfig, get_logger
from app.routers import bot_engine_router, flows_router, menus_router
from app.routers.sessions_router import sessions_router

logger = get_logger("main")


def create_app(testing: bool = False) -> FastAPI:
    """Build the API. `testing` skips process-wide logging setup."""
    settings = get_settings()
    if not testing:
        LoggingConfig()

    app = FastAPI(title=settings.app_name)

    app.include_router(bot_engine_router.router)
    app.include_router(flows_router.router)
    app.include_router(sessions_router)
    app.include_router(menus_router.router)

    @app.get("/health", tags=["health"])
    def health() -> dict:
        return {"status": "ok"}

    add_pagination(app)
    logger.debug("Application created (environment=%s)", settings.environment)
    return app


app = create_app()
