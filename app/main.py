"""FastAPI application factory. No business logic; only wiring and middleware.

Run with: uvicorn app.main:create_app --factory
"""

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1 import health
from app.api.v1 import router as api_router
from app.core.config import Settings, get_settings
from app.core.database import Database
from app.core.errors import register_exception_handlers
from app.core.logging_config import configure_logging
from app.services.token_cleanup import token_cleanup_loop

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the app with its own Database; nothing is shared between app instances."""
    if settings is None:
        load_dotenv()
        settings = get_settings()
    configure_logging(settings.LOG_LEVEL)
    db = Database(settings.DATABASE_URL, echo=settings.DEBUG)

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await asyncio.to_thread(
            db.connect_with_retry,
            settings.DB_CONNECT_RETRIES,
            settings.DB_CONNECT_RETRY_DELAY_SEC,
        )
        cleanup_task = None
        if settings.REFRESH_TOKEN_CLEANUP_ENABLED:
            cleanup_task = asyncio.create_task(token_cleanup_loop(db, settings))
        logger.info("Eventhub API started (env=%s)", settings.APP_ENV)
        try:
            yield
        finally:
            if cleanup_task is not None:
                cleanup_task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await cleanup_task
            db.dispose()
            logger.info("Eventhub API stopped")

    app = FastAPI(
        title="Eventhub API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.db = db

    if settings.CORS_ORIGINS:
        origins = settings.CORS_ORIGINS
    else:
        origins = ["*"] if settings.APP_ENV == "dev" else []
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app, expose_stack=settings.APP_ENV == "dev")
    app.include_router(health.router, prefix="/health", tags=["health"])
    app.include_router(api_router, prefix=settings.API_PREFIX)

    @app.get("/")
    def root() -> dict[str, str]:
        """Root route; minimal payload for discovery."""
        return {"message": "Eventhub API"}

    return app
