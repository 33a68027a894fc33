"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures middleware, exception handlers, and lifespan events.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from psycopg_pool import AsyncConnectionPool

from src.adapters.repository.postgres import PostgresCodeStore, run_migrations
from src.adapters.smtp.console import ConsoleEmailSender
from src.adapters.smtp.smtp import SmtpEmailSender
from src.api.routes import router
from src.config.settings import Settings, get_settings
from src.domain.ports import EmailSender
from src.domain.reaper import ExpiryReaper

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "verification",
        "description": "Issue and verify short-lived email verification codes",
    },
]


def build_email_sender(settings: Settings) -> EmailSender:
    """Select the mail transport configured by EMAIL_BACKEND."""
    if settings.email_backend == "smtp":
        return SmtpEmailSender(
            hostname=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_username,
            password=settings.smtp_password,
            from_address=settings.smtp_from,
            timeout=settings.smtp_timeout_seconds,
        )
    return ConsoleEmailSender()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Creates database connection pool and runs migrations on startup
    - Starts the expiry reaper once the store is ready
    - Stops the reaper, then closes the pool on shutdown
    """
    settings: Settings = app.state.settings

    logger.info("Starting application...")
    logger.info("Connecting to database...")

    pool = AsyncConnectionPool(
        conninfo=settings.database_url,
        min_size=settings.pool_min_size,
        max_size=settings.pool_max_size,
        open=False,
    )
    await pool.open()

    logger.info("Running database migrations...")
    await run_migrations(pool)

    store = PostgresCodeStore(pool, ping_timeout=settings.health_db_timeout_seconds)
    app.state.pool = pool
    app.state.store = store
    app.state.email_sender = build_email_sender(settings)

    reaper = ExpiryReaper(
        store=store,
        ttl_seconds=settings.code_ttl_seconds,
        interval_seconds=settings.reaper_interval_seconds,
    )
    reaper.start()
    app.state.reaper = reaper

    logger.info("Application startup complete")

    yield

    logger.info("Shutting down application...")
    await reaper.stop()
    await pool.close()
    logger.info("Database connection pool closed")


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies are client errors: answer 400 without echoing the parser detail."""
    logger.info("Rejected malformed request to %s: %s", request.url.path, exc.errors())
    content: dict[str, object] = {"message": "Invalid request body."}
    if request.url.path == "/verify-code":
        content = {"valid": False, **content}
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=content)


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Explicit settings (tests); defaults to the cached environment settings
    """
    settings = settings or get_settings()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )

    application = FastAPI(
        title="stackverify",
        description="Short-lived email verification codes with dependency health checks",
        version="0.1.0",
        openapi_tags=tags_metadata,
        lifespan=lifespan,
    )
    application.state.settings = settings

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.add_exception_handler(RequestValidationError, request_validation_handler)
    application.include_router(router, tags=["verification"])

    return application


app = create_app()
