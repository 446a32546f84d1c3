"""FastAPI application initialization and configuration."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import settings
from .core.database import Database
from .core.exceptions import (
    ApiError,
    api_error_handler,
    generic_exception_handler,
    http_exception_handler,
    request_validation_handler,
)
from .core.middleware import setup_middleware
from .core.observability import (
    SERVICE_NAME,
    SERVICE_VERSION,
    instrument_fastapi,
    instrument_sqlalchemy,
    setup_metrics,
    setup_structured_logging,
    setup_tracing,
)
from .integrations.notifications import CrmNotifier
from .integrations.payments import PaymentGateway
from .routers import (
    admin_router,
    booking_requests_router,
    booking_values_router,
    bookings_router,
    health_router,
    metrics_router,
    property_assignment_router,
    stripe_router,
)
from .workers.manager import WorkerManager

# Configure structured logging
setup_structured_logging()

# Configure traditional logging for compatibility
logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Builds the process-wide collaborators (database, payment gateway, CRM
    notifier, background workers), stores them on ``app.state`` and closes
    them again on shutdown.
    """
    logger.info("Starting FastAPI application")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Debug mode: {settings.debug}")

    database = Database(settings.database_url, echo=False)
    app.state.database = database
    app.state.payment_gateway = PaymentGateway.from_settings(settings)
    app.state.notifier = CrmNotifier.from_settings(settings)
    app.state.workers = WorkerManager(database, settings)

    try:
        await database.create_all()
        logger.info("Database initialized successfully")

        setup_tracing()
        setup_metrics()
        instrument_sqlalchemy(database.engine)
        logger.info("Observability setup completed")

        await app.state.workers.start_all()
        logger.info("Background workers started successfully")
    except Exception as e:
        logger.error(f"Failed to initialize application: {e}")
        raise

    logger.info("Application startup complete")

    yield

    logger.info("Shutting down FastAPI application")

    try:
        await app.state.workers.stop_all()
        logger.info("Background workers stopped")

        await app.state.notifier.aclose()

        await database.dispose()
        logger.info("Database connections closed")
    except Exception as e:
        logger.error(f"Error during application cleanup: {e}")

    logger.info("Application shutdown complete")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    app = FastAPI(
        title="Booking Hub API",
        description="Booking intake, property assignment, Stripe payments and admin confirmation for a contractor accommodation marketplace",
        version=SERVICE_VERSION,
        debug=settings.debug,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "traceparent", "tracestate"],
    )

    # Setup custom middleware
    setup_middleware(app, enable_logging=True)

    # Instrument FastAPI with OpenTelemetry
    instrument_fastapi(app)

    # Register exception handlers
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    @app.get(
        "/health",
        status_code=status.HTTP_200_OK,
        tags=["Health"],
        summary="Health Check",
        description="Check if the service is healthy and responsive",
        response_model=dict,
    )
    async def health_check():
        """
        Health check endpoint that returns service status.

        Returns:
            dict: Health status information
        """
        return {
            "status": "healthy",
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION,
            "environment": settings.environment,
            "debug": settings.debug,
        }

    @app.get(
        "/ready",
        status_code=status.HTTP_200_OK,
        tags=["Health"],
        summary="Readiness Check",
        description="Check if the service can reach its database",
        response_model=dict,
    )
    async def readiness_check(request: Request):
        """
        Readiness check endpoint that verifies the database connection.

        Returns:
            dict: Readiness status information
        """
        database = getattr(request.app.state, "database", None)
        checks = {
            "database": "ok",
            "stripe": "ok" if settings.stripe_secret_key else "not_configured",
            "crm_webhook": "ok" if settings.crm_webhook_url else "not_configured",
        }

        if database is None:
            checks["database"] = "not_initialized"
        else:
            try:
                async with database.engine.connect() as conn:
                    await conn.execute(text("SELECT 1"))
            except SQLAlchemyError as e:
                logger.warning("Readiness database check failed", extra={"error": str(e)})
                checks["database"] = "unavailable"

        ready = checks["database"] == "ok"
        return JSONResponse(
            status_code=status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "ready" if ready else "not_ready",
                "service": SERVICE_NAME,
                "checks": checks,
            },
        )

    @app.get(
        "/info",
        status_code=status.HTTP_200_OK,
        tags=["Info"],
        summary="Service Information",
        description="Get detailed information about the service",
        response_model=dict,
    )
    async def service_info(request: Request):
        """
        Service information endpoint.

        Returns:
            dict: Detailed service information, including background worker status
        """
        workers = getattr(request.app.state, "workers", None)
        return {
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION,
            "description": "Booking lifecycle and property assignment API",
            "environment": settings.environment,
            "debug": settings.debug,
            "features": {
                "authentication": True,
                "payments": bool(settings.stripe_secret_key),
                "crm_notifications": bool(settings.crm_webhook_url),
                "tracing": bool(settings.otlp_endpoint),
            },
            "workers": workers.get_worker_status() if workers else {},
            "endpoints": {
                "health": "/health",
                "readiness": "/ready",
                "info": "/info",
                "metrics": "/metrics",
                "docs": "/docs" if settings.debug else None,
                "redoc": "/redoc" if settings.debug else None,
            },
        }

    # Register API routers
    app.include_router(health_router)
    app.include_router(booking_requests_router)
    app.include_router(property_assignment_router)
    app.include_router(booking_values_router)
    app.include_router(stripe_router)
    app.include_router(bookings_router)
    app.include_router(admin_router)
    app.include_router(metrics_router)

    logger.info("FastAPI application created and configured")

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "bookinghub.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
        access_log=True,
    )
