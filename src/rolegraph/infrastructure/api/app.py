"""FastAPI application factory and configuration.

This module provides the application factory function for creating
and configuring the FastAPI application with all middleware, routes,
and lifecycle handlers.
"""

import uuid
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from rolegraph.core.config import get_settings
from rolegraph.core.exceptions import (
    CyclicCompositionError,
    DuplicateNameError,
    ForbiddenError,
    NotFoundError,
    RoleGraphError,
    StoreUnavailableError,
)
from rolegraph.core.logging import bind_correlation_id, clear_context, configure_logging, get_logger
from rolegraph.domain.services import AuditRecorder
from rolegraph.infrastructure.persistence.database import close_database, init_database

logger = get_logger(__name__)

# Most specific first: lookup walks this in order
ERROR_STATUS_CODES: list[tuple[type[RoleGraphError], int, str]] = [
    (NotFoundError, status.HTTP_404_NOT_FOUND, "Not found"),
    (DuplicateNameError, status.HTTP_409_CONFLICT, "Conflict"),
    (CyclicCompositionError, status.HTTP_409_CONFLICT, "Cyclic composition"),
    (ForbiddenError, status.HTTP_403_FORBIDDEN, "Forbidden"),
    (StoreUnavailableError, status.HTTP_503_SERVICE_UNAVAILABLE, "Service unavailable"),
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Handles startup and shutdown events for the application.
    """
    settings = get_settings()
    configure_logging(settings)

    logger.info(
        "Starting RoleGraph",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )

    try:
        await init_database()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error("Failed to initialize database", error=str(e))
        raise

    app.state.audit_recorder = AuditRecorder(
        include_representation=settings.audit_include_representation
    )

    yield

    logger.info("Shutting down RoleGraph")
    await close_database()
    logger.info("Database connection closed")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Realm and client roles with composite role graphs",
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    register_health_check(app)
    register_routes(app)
    register_exception_handlers(app)
    register_middleware(app)

    return app


def register_health_check(app: FastAPI) -> None:
    """Register health check endpoints."""

    @app.get("/health", tags=["health"])
    async def health_check():
        """Basic health check endpoint."""
        return {
            "status": "healthy",
            "service": "RoleGraph",
            "version": get_settings().app_version,
        }

    @app.get("/ready", tags=["health"])
    async def readiness_check():
        """Readiness check endpoint, including database connectivity."""
        from rolegraph.infrastructure.persistence.database import get_db_manager

        if await get_db_manager().check_connection():
            return {"status": "ready", "service": "RoleGraph", "database": "connected"}
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "service": "RoleGraph", "database": "disconnected"},
        )


def register_routes(app: FastAPI) -> None:
    """Register API routes."""
    from rolegraph.infrastructure.api.routes import client_roles_router, realm_roles_router

    settings = get_settings()

    app.include_router(
        realm_roles_router,
        prefix=f"{settings.api_prefix}/realms/{{realm}}/roles",
        tags=["realm roles"],
    )
    app.include_router(
        client_roles_router,
        prefix=f"{settings.api_prefix}/realms/{{realm}}/clients/{{client_uuid}}/roles",
        tags=["client roles"],
    )


def error_status(exc: RoleGraphError) -> tuple[int, str]:
    """Map a domain error to an HTTP status code and error label."""
    for error_type, status_code, label in ERROR_STATUS_CODES:
        if isinstance(exc, error_type):
            return status_code, label
    return status.HTTP_400_BAD_REQUEST, "Bad request"


def register_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    @app.exception_handler(RoleGraphError)
    async def role_graph_error_handler(request: Request, exc: RoleGraphError):
        """Turn domain errors into JSON error responses."""
        status_code, label = error_status(exc)
        logger.info(
            "Request rejected",
            path=str(request.url.path),
            method=request.method,
            status_code=status_code,
            exc_type=type(exc).__name__,
        )
        return JSONResponse(
            status_code=status_code,
            content={"error": label, "detail": str(exc)},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle uncaught exceptions."""
        logger.error(
            "Unhandled exception",
            path=str(request.url),
            method=request.method,
            error=str(exc),
            exc_type=type(exc).__name__,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "Internal server error",
                "detail": str(exc) if get_settings().debug else "An unexpected error occurred",
            },
        )


def register_middleware(app: FastAPI) -> None:
    """Register custom middleware."""

    @app.middleware("http")
    async def logging_middleware(request, call_next):
        """Log every request and propagate the correlation ID."""
        correlation_id = request.headers.get("X-Correlation-ID", f"cid_{uuid.uuid4().hex[:12]}")
        bind_correlation_id(correlation_id)

        logger.info(
            "Request started",
            method=request.method,
            path=str(request.url.path),
        )

        try:
            response = await call_next(request)
            logger.info(
                "Request completed",
                method=request.method,
                path=str(request.url.path),
                status_code=response.status_code,
            )
            response.headers["X-Correlation-ID"] = correlation_id
            return response
        finally:
            clear_context()


# Create the application instance
app = create_app()
