"""
FastAPI application entry point for the REVA lead service.

This module:
- Builds the application (create_app) with middleware and routers
- Sets up structured logging with structlog
- Implements global exception handlers for consistent error responses
- Manages application lifecycle (tables, cache sweeper, HTTP clients)

Design decisions:
- Process-wide state (cache, request monitor, HTTP clients, DB engine) is
  constructed once per app and stored on app.state; tests build their own
  app with fresh instances
- Structured logging (JSON in prod, console in dev) for observability
- Global exception handlers for consistent error format
- Per-IP rate limiting with slowapi; rejected requests never reach the
  monitor
"""

import logging
import time
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from reva.api.routes import auth, health, leads
from reva.config import Settings, settings as default_settings
from reva.core.cache import TTLCache
from reva.core.exceptions import ExternalAPIError, LeadNotFoundError
from reva.core.metrics import PerformanceMonitor
from reva.core.middleware import add_security_headers, log_requests, monitor_requests
from reva.models.base import create_db_engine, create_session_factory
from reva.models.database import create_tables
from reva.services.pdl_client import PDLClient
from reva.services.places_client import PlacesClient

RATE_LIMIT_MESSAGE = "Too many requests from this IP, please try again later."

# ===== Structured Logging Configuration =====

logging.basicConfig(format="%(message)s", level=default_settings.log_level.upper())

structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        # JSON for production (machine-readable), Console for dev (human-readable)
        structlog.processors.JSONRenderer() if default_settings.log_format == "json"
        else structlog.dev.ConsoleRenderer(),
    ]
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup: create tables, start the cache sweeper.
    Shutdown: stop the sweeper, close HTTP clients (connection pools).
    """
    app_settings: Settings = app.state.settings
    logger.info(
        "application_starting",
        service="REVA Lead Service",
        version="0.1.0",
        environment=app_settings.app_env,
        log_level=app_settings.log_level,
        live_search=app.state.places_client.is_configured,
        enrichment_enabled=bool(app_settings.pdl_api_key)
    )

    create_tables(app.state.engine)
    app.state.cache.start_sweeper(app_settings.cache_sweep_interval_seconds)

    yield  # Application is running

    logger.info("application_shutting_down")
    await app.state.cache.stop_sweeper()
    await app.state.pdl_client.close()
    await app.state.places_client.close()
    app.state.engine.dispose()
    logger.info("shutdown_complete")


# ===== Global Exception Handlers =====


async def external_api_error_handler(request: Request, exc: ExternalAPIError):
    """
    Convert third-party API failures into structured responses.

    Response format:
    {
        "error": "PLACES_001",
        "message": "Google Places API error: REQUEST_DENIED",
        "status_code": 502,
        "details": {...},
        "retryable": false
    }
    """
    logger.error(
        "external_api_error",
        error_code=exc.error_code.value,
        message=exc.message,
        status_code=exc.status_code,
        details=exc.details,
        retryable=exc.retryable,
        path=request.url.path
    )

    return JSONResponse(
        status_code=exc.status_code or status.HTTP_502_BAD_GATEWAY,
        content=exc.to_dict()
    )


async def lead_not_found_handler(request: Request, exc: LeadNotFoundError):
    logger.info("lead_not_found", lead_id=exc.lead_id, path=request.url.path)
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content=exc.to_dict())


async def validation_error_handler(request: Request, exc: RequestValidationError):
    """
    Handle Pydantic validation errors with clear messages.

    Response includes detailed validation errors for debugging.
    """
    logger.warning(
        "validation_error",
        errors=jsonable_errors(exc),
        path=request.url.path
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "VALIDATION_ERROR",
            "message": "Invalid request data",
            "details": jsonable_errors(exc)
        }
    )


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    # input may echo a password; ctx may hold the raised ValueError itself
    return [
        {key: value for key, value in error.items() if key not in ("input", "ctx", "url")}
        for error in exc.errors()
    ]


def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    logger.warning("rate_limit_exceeded", client_ip=get_remote_address(request), path=request.url.path)
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={"error": RATE_LIMIT_MESSAGE}
    )


async def generic_error_handler(request: Request, exc: Exception):
    """
    Catch-all handler for unexpected exceptions.

    Logs the full exception while returning a safe response.
    """
    logger.exception(
        "unexpected_error",
        error_type=type(exc).__name__,
        error_message=str(exc),
        path=request.url.path
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "INTERNAL_ERROR",
            "message": "An unexpected error occurred. Please try again later.",
            "reference_id": f"err_{int(time.time())}"
        }
    )


def create_app(
    app_settings: Settings | None = None,
    cache: TTLCache | None = None,
    monitor: PerformanceMonitor | None = None,
    pdl_client: PDLClient | None = None,
    places_client: PlacesClient | None = None,
) -> FastAPI:
    """
    Build the application and its process-wide state.

    Every argument is optional; tests pass their own cache (with a fake
    clock), monitor or HTTP clients.
    """
    app_settings = app_settings or default_settings
    if cache is None:
        cache = TTLCache()

    app = FastAPI(
        title="REVA Lead Service",
        description="Commercial real-estate tenant lead generation and enrichment",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.state.settings = app_settings
    app.state.cache = cache
    app.state.monitor = monitor if monitor is not None else PerformanceMonitor(
        capacity=app_settings.metrics_capacity,
        slow_threshold_ms=app_settings.slow_request_threshold_ms
    )
    app.state.pdl_client = pdl_client or PDLClient(app_settings, cache)
    app.state.places_client = places_client or PlacesClient(app_settings)
    app.state.engine = create_db_engine(app_settings.database_url)
    app.state.session_factory = create_session_factory(app.state.engine)
    app.state.started_at = time.monotonic()
    # Single per-IP window (API_RATE_LIMIT). Requests over it get an immediate
    # 429 rather than a progressive delay; the monitor never sees them.
    app.state.limiter = Limiter(
        key_func=get_remote_address,
        default_limits=[app_settings.api_rate_limit],
        enabled=app_settings.rate_limit_enabled
    )

    # ===== Middleware Configuration =====
    # Added innermost first: CORS -> rate limit -> monitoring -> logging -> headers -> route

    app.middleware("http")(add_security_headers)
    app.middleware("http")(log_requests)
    app.middleware("http")(monitor_requests)
    app.add_middleware(SlowAPIMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
        max_age=600,  # Cache preflight requests for 10 minutes
    )

    app.add_exception_handler(ExternalAPIError, external_api_error_handler)
    app.add_exception_handler(LeadNotFoundError, lead_not_found_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(Exception, generic_error_handler)

    # ===== Router Registration =====
    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(leads.router)

    return app


app = create_app()
