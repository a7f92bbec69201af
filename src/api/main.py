"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures exception handlers, routers, and lifespan events.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from psycopg_pool import ConnectionPool

from src.adapters.repository.memory import InMemoryUserRepository
from src.adapters.repository.postgres import PostgresUserRepository, run_migrations
from src.api.dependencies import build_email_sender, build_token_issuer
from src.api.errors import register_exception_handlers
from src.api.v1 import router as v1_router
from src.config.settings import Settings, get_settings

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "authentication",
        "description": "Registration, email verification, login and password reset",
    },
    {
        "name": "users",
        "description": "User management - role-gated with bearer session tokens",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Creates the user repository selected by settings.storage_backend
    - For postgres: opens the connection pool and runs migrations
    - Closes connection pool on shutdown
    """
    settings: Settings = app.state.settings
    logging.basicConfig(level=settings.log_level.upper())

    logger.info("Starting application...")

    pool: ConnectionPool | None = None
    if settings.storage_backend == "postgres":
        logger.info("Connecting to database...")

        # Create connection pool with explicit sizing
        pool = ConnectionPool(
            conninfo=settings.database_url,
            min_size=settings.pool_min_size,
            max_size=settings.pool_max_size,
            open=True,
        )

        logger.info("Running database migrations...")
        run_migrations(pool)

        app.state.repository = PostgresUserRepository(pool)
    else:
        logger.info("Using in-memory user repository")
        app.state.repository = InMemoryUserRepository()

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    if pool is not None:
        pool.close()
        logger.info("Database connection pool closed")


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Build the application around one Settings object.

    Stateless collaborators are created here; the repository is created
    in lifespan because it may hold a connection pool.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="eduplatform",
        description="Education Platform API - user registration, email verification and sessions",
        version="0.1.0",
        openapi_tags=tags_metadata,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.email_sender = build_email_sender(settings)
    app.state.token_issuer = build_token_issuer(settings)

    register_exception_handlers(app)
    app.include_router(v1_router, prefix=settings.api_prefix)

    @app.get("/health")
    def health_check(request: Request) -> dict[str, str]:
        """
        Health check endpoint with storage validation.

        Returns 200 OK if application and storage are healthy.
        Storage failures surface through the error envelope as 500.
        """
        request.app.state.repository.ping()
        return {"status": "healthy"}

    return app


app = create_app()
