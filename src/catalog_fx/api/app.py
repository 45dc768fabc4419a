"""FastAPI application factory and dependency injection setup."""

import uuid
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from catalog_fx.api.routes import (
    get_app_container,
    health_router,
    integration_router,
    product_router,
    rate_router,
    vendor_router,
)
from catalog_fx.config import get_settings
from catalog_fx.container import get_container, reset_container
from catalog_fx.exceptions import CatalogFxError
from catalog_fx.logging_config import (
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
)

logger = get_logger(__name__)

__all__ = ["app", "create_app", "get_app_container"]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup and shutdown.

    Initializes logging and the DI container on startup,
    cleans up resources on shutdown.
    """
    settings = get_settings()
    configure_logging(settings)

    logger.info(
        "application_starting",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment.value,
        base_currency=settings.base_currency,
    )

    container = get_container()
    _ = container.database  # Force database initialization

    logger.info("application_started")

    yield

    logger.info("application_stopping")
    reset_container()
    logger.info("application_stopped")


async def log_request_middleware(request: Request, call_next):
    """Middleware to add request context to logs."""
    request_id = str(uuid.uuid4())[:8]
    bind_context(request_id=request_id, path=request.url.path, method=request.method)

    try:
        response = await call_next(request)
        logger.debug(
            "request_completed",
            status_code=response.status_code,
        )
        return response
    finally:
        clear_context()


async def exception_handler(request: Request, exc: CatalogFxError) -> JSONResponse:
    """Handle domain exceptions and return appropriate JSON responses."""
    logger.warning(
        "domain_exception",
        error_code=exc.error_code,
        message=exc.message,
        context=exc.context,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Vendor price normalization into a single base currency",
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.middleware("http")(log_request_middleware)
    app.add_exception_handler(CatalogFxError, exception_handler)

    app.include_router(health_router)
    app.include_router(rate_router)
    app.include_router(vendor_router)
    app.include_router(product_router)
    app.include_router(integration_router)

    return app


# Create app instance for uvicorn
app = create_app()
