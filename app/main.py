"""FastAPI application factory: entry point for BookFinalAPI."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from starlette.middleware.authentication import AuthenticationMiddleware
from starlette.middleware.httpsredirect import HTTPSRedirectMiddleware

from app.api.docs import docs_urls, install_openapi
from app.api.middleware.auth import JWTAuthBackend
from app.api.middleware.request_context import RequestContextMiddleware
from app.api.routes.admin import router as admin_router
from app.api.routes.auth import protected as auth_protected_router
from app.api.routes.auth import router as auth_router
from app.api.routes.media import router as media_router
from app.api.schemas import HealthResponse
from app.config import Settings, get_settings
from app.database import Database
from app.exceptions import register_exception_handlers
from app.logging_config import configure_logging
from app.seed import seed_identity
from app.services.identity import PasswordPolicy

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: startup and shutdown events."""
    settings: Settings = app.state.settings
    database: Database = app.state.database
    logger.info("BookFinalAPI starting up in %s", settings.ENVIRONMENT)
    logger.info("Listening port: %d", settings.PORT)
    logger.info("Storage backend: %s", settings.STORAGE_BACKEND.value)
    if settings.SEED_ON_STARTUP:
        async with database.session_factory() as session:
            await seed_identity(session)
    yield
    logger.info("BookFinalAPI shutting down...")
    await database.dispose()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build and configure the FastAPI application."""
    settings = settings or get_settings()

    # ── Logging ────────────────────────────────────
    configure_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)

    # ── API documentation ──────────────────────────
    application = FastAPI(
        title="BookFinalAPI",
        description="Book service API",
        version="v1",
        lifespan=lifespan,
        **docs_urls(settings.is_development),
    )
    install_openapi(application)

    # ── Persistence, identity, scoped services ─────
    application.state.settings = settings
    application.state.database = Database(settings.connection_string, echo=settings.DB_ECHO)
    application.state.password_policy = PasswordPolicy(required_length=6, require_digit=False)

    register_exception_handlers(application)

    # ── Middleware ──────────────────────────────────
    # Added innermost first: request context -> HTTPS redirect -> authentication.
    application.add_middleware(
        AuthenticationMiddleware,
        backend=JWTAuthBackend(settings, application.state.database),
    )
    if settings.HTTPS_REDIRECT:
        application.add_middleware(HTTPSRedirectMiddleware)
    application.add_middleware(RequestContextMiddleware)

    # ── Routes ─────────────────────────────────────
    application.include_router(auth_router)
    application.include_router(auth_protected_router)
    application.include_router(media_router)
    application.include_router(admin_router)

    # ── Health Check ───────────────────────────────
    @application.get("/health", tags=["System"], response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(
            status="healthy",
            service="bookfinal-api",
            environment=settings.ENVIRONMENT,
        )

    return application


app = create_app()
