"""
FastAPI application entry point for the Local Library catalog.

This module provides the main FastAPI application with:
- Server-rendered catalog views (genres, authors, books, book copies)
- Health and readiness endpoints
- Request/response logging with correlation ids
- Prometheus metrics
- OpenTelemetry distributed tracing
- Security headers and compression
- MongoDB client management
- Graceful startup and shutdown
"""

import time
import uuid
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Dict, Any

import uvicorn
from fastapi import Depends, FastAPI, Request, Response, status
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles
from prometheus_client import CONTENT_TYPE_LATEST
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.routing import Match

from catalog.src.config import get_settings, Settings
from catalog.src.dependencies import (
    close_mongo_client,
    ensure_indexes,
    get_database,
    init_mongo_client,
)
from catalog.src.errors import EntityNotFoundError
from catalog.src.routers import authors, book_instances, books, catalog, genres
from catalog.src.templating import render
from shared.logging import bind_context, configure_logging, get_logger, unbind_context
from shared.metrics import get_metrics_handler, http_metrics
from shared.models import HealthStatus, ServiceInfo
from shared.tracing import configure_tracing, instrument_app, shutdown_tracing

# Get settings
settings: Settings = get_settings()

configure_logging(
    log_level=settings.log_level,
    json_logs=settings.json_logs,
    service_name=settings.app_name,
    environment=settings.environment,
)

# Initialize logger
logger = get_logger(__name__)

STATIC_DIR = Path(__file__).parent / "static"

# ============================================================================
# Lifespan Management
# ============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager for startup and shutdown events.

    Handles:
    - OpenTelemetry tracing setup
    - MongoDB client initialization and index creation
    - Graceful shutdown and resource cleanup
    """
    logger.info(
        "application_starting",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment
    )

    # ========================================================================
    # Startup: Initialize Resources
    # ========================================================================

    try:
        if settings.tracing_enabled:
            logger.info("initializing_tracing", otlp_endpoint=settings.tracing_otlp_endpoint)
            configure_tracing(
                settings.app_name,
                service_version=settings.app_version,
                otlp_endpoint=settings.tracing_otlp_endpoint,
                environment=settings.environment,
            )
            logger.info("tracing_initialized")

        client = await init_mongo_client(settings)
        await ensure_indexes(client[settings.mongodb_database])

        logger.info(
            "application_started",
            app_name=settings.app_name,
            version=settings.app_version,
            environment=settings.environment
        )

        yield

    except Exception as e:
        logger.error("application_startup_failed", error=str(e), exc_info=True)
        raise

    # ========================================================================
    # Shutdown: Cleanup Resources
    # ========================================================================

    finally:
        logger.info("application_shutting_down")

        try:
            await close_mongo_client()

            if settings.tracing_enabled:
                logger.info("shutting_down_tracing")
                shutdown_tracing()

            logger.info("application_shutdown_complete")

        except Exception as e:
            logger.error("application_shutdown_failed", error=str(e), exc_info=True)


# ============================================================================
# FastAPI Application
# ============================================================================

app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Catalog of a small lending library: genres, authors, books and their copies.",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
    debug=settings.debug,
)

# ============================================================================
# Middleware Configuration
# ============================================================================

# GZip Compression Middleware
app.add_middleware(GZipMiddleware, minimum_size=settings.gzip_minimum_size)


def route_template(request: Request) -> str:
    """Path template of the matching route, so metrics are not labeled per id."""
    for route in request.app.router.routes:
        match, _ = route.matches(request.scope)
        if match == Match.FULL:
            return getattr(route, "path", request.url.path)
    return "unmatched"


# Request Logging and Metrics Middleware
class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for request logging and metrics."""

    async def dispatch(self, request: Request, call_next):
        """Process request and log details."""
        correlation_id = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())

        method = request.method
        path = request.url.path
        endpoint = route_template(request)
        client_ip = request.client.host if request.client else "unknown"

        bind_context(correlation_id=correlation_id)

        http_metrics.requests_in_progress.labels(method=method, endpoint=endpoint).inc()
        start_time = time.time()

        logger.info(
            "request_started",
            method=method,
            path=path,
            client_ip=client_ip,
        )

        try:
            response = await call_next(request)

            duration = time.time() - start_time

            http_metrics.requests_total.labels(
                method=method,
                endpoint=endpoint,
                status=response.status_code
            ).inc()
            http_metrics.request_duration.labels(
                method=method,
                endpoint=endpoint
            ).observe(duration)

            logger.info(
                "request_completed",
                method=method,
                path=path,
                status_code=response.status_code,
                duration=f"{duration:.3f}s",
            )

            response.headers["X-Correlation-ID"] = correlation_id
            return response

        except Exception as e:
            duration = time.time() - start_time
            logger.error(
                "request_failed",
                method=method,
                path=path,
                error=str(e),
                duration=f"{duration:.3f}s",
                exc_info=True
            )
            raise

        finally:
            http_metrics.requests_in_progress.labels(method=method, endpoint=endpoint).dec()
            unbind_context("correlation_id")


app.add_middleware(RequestLoggingMiddleware)


# Security Headers Middleware
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware to add security headers to responses."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        if settings.security_headers_enabled:
            response.headers["X-Content-Type-Options"] = "nosniff"
            response.headers["X-Frame-Options"] = "DENY"
            response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        return response


app.add_middleware(SecurityHeadersMiddleware)

# OpenTelemetry Instrumentation
if settings.tracing_enabled:
    instrument_app(app)

# ============================================================================
# Exception Handlers
# ============================================================================


def render_error(request: Request, status_code: int, message: str, detail: str = ""):
    """Render the error page; details are only shown outside production."""
    return render(
        request,
        "error.html",
        {
            "title": "Error",
            "message": message,
            "status_code": status_code,
            "detail": detail if settings.debug or settings.is_development else "",
        },
        status_code=status_code,
    )


@app.exception_handler(EntityNotFoundError)
async def not_found_handler(request: Request, exc: EntityNotFoundError):
    """Handle ids that do not resolve to a stored entity."""
    logger.warning(
        "entity_not_found",
        path=request.url.path,
        entity=exc.entity,
        entity_id=exc.entity_id
    )
    return render_error(request, status.HTTP_404_NOT_FOUND, str(exc))


@app.exception_handler(PyMongoError)
async def storage_exception_handler(request: Request, exc: PyMongoError):
    """Handle storage failures raised from any query or write."""
    logger.error(
        "storage_error",
        path=request.url.path,
        error=str(exc),
        exc_info=exc
    )
    return render_error(
        request, status.HTTP_500_INTERNAL_SERVER_ERROR, "Storage error", detail=str(exc)
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions, including unknown routes."""
    logger.warning(
        "http_exception",
        path=request.url.path,
        status_code=exc.status_code,
        detail=exc.detail
    )
    message = "Not Found" if exc.status_code == status.HTTP_404_NOT_FOUND else str(exc.detail)
    return render_error(request, exc.status_code, message)


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.error(
        "unexpected_exception",
        path=request.url.path,
        error=str(exc),
        exc_info=exc
    )
    return render_error(
        request, status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", detail=str(exc)
    )


# ============================================================================
# Health and Readiness Endpoints
# ============================================================================


@app.get("/health", tags=["Health"], response_class=JSONResponse)
async def health_check() -> Dict[str, Any]:
    """
    Health check endpoint.

    Returns basic health status without checking dependencies.
    Use for container health checks.
    """
    return ServiceInfo(
        service=settings.app_name,
        version=settings.app_version,
        status=HealthStatus.HEALTHY.value,
        environment=settings.environment,
    ).model_dump()


@app.get("/ready", tags=["Health"], response_class=JSONResponse)
async def readiness_check(database: AsyncDatabase = Depends(get_database)):
    """
    Readiness check endpoint.

    Pings MongoDB; responds 503 while the database is unreachable.
    """
    checks = {"database": HealthStatus.HEALTHY}

    try:
        await database.command("ping")
    except Exception as e:
        logger.error("database_health_check_failed", error=str(e))
        checks["database"] = HealthStatus.UNHEALTHY

    all_healthy = all(check == HealthStatus.HEALTHY for check in checks.values())
    info = ServiceInfo(
        service=settings.app_name,
        version=settings.app_version,
        status="ready" if all_healthy else "not_ready",
        environment=settings.environment,
        checks=checks,
    )

    return JSONResponse(
        status_code=status.HTTP_200_OK if all_healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content=info.model_dump(),
    )


# ============================================================================
# Metrics Endpoint
# ============================================================================

if settings.metrics_enabled:
    metrics_handler = get_metrics_handler()

    @app.get("/metrics", tags=["Monitoring"], response_class=PlainTextResponse)
    async def metrics() -> Response:
        """Prometheus metrics endpoint."""
        return Response(content=metrics_handler(), media_type=CONTENT_TYPE_LATEST)


# ============================================================================
# Router Registration
# ============================================================================

app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

app.include_router(catalog.router)
app.include_router(genres.router)
app.include_router(authors.router)
app.include_router(books.router)
app.include_router(book_instances.router)

# ============================================================================
# Application Entry Point
# ============================================================================

if __name__ == "__main__":
    logger.info(
        "starting_uvicorn_server",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )

    uvicorn.run(
        "catalog.src.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
        access_log=True,
    )
