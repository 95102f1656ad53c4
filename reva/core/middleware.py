"""
HTTP middleware for monitoring, request logging and security headers.

Registered in reva.main with @app.middleware("http"). The monitor is read
from app.state so each app instance (and each test) has its own.
"""

import time

import structlog
from fastapi import Request, status
from starlette.responses import Response

from reva.core.metrics import PerformanceMonitor, RequestMetric

logger = structlog.get_logger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "Content-Security-Policy": (
        "default-src 'self'; "
        "style-src 'self' 'unsafe-inline' https://fonts.googleapis.com; "
        "font-src 'self' https://fonts.gstatic.com; "
        "img-src 'self' data: https:; "
        "connect-src 'self' https://api.peopledatalabs.com"
    ),
}


def client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


async def monitor_requests(request: Request, call_next) -> Response:
    """
    Record one RequestMetric per finished request.

    Requests slower than the monitor's threshold are also logged as a
    warning. A request that raised is recorded as a 500.
    """
    monitor: PerformanceMonitor = request.app.state.monitor
    start_time = time.perf_counter()
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    try:
        response = await call_next(request)
        status_code = response.status_code
        return response
    finally:
        duration_ms = int((time.perf_counter() - start_time) * 1000)
        monitor.record(RequestMetric(
            method=request.method,
            path=request.url.path,
            status_code=status_code,
            duration_ms=duration_ms,
            client_ip=client_ip(request),
            user_agent=request.headers.get("user-agent"),
        ))
        if duration_ms > monitor.slow_threshold_ms:
            logger.warning(
                "slow_request_detected",
                method=request.method,
                path=request.url.path,
                duration_ms=duration_ms
            )


async def log_requests(request: Request, call_next) -> Response:
    """
    Log all incoming requests with timing information.

    Adds X-Process-Time header to response for debugging.
    """
    start_time = time.time()

    logger.info(
        "request_started",
        method=request.method,
        path=request.url.path,
        client_ip=client_ip(request),
        user_agent=request.headers.get("user-agent", "unknown")
    )

    response = await call_next(request)

    process_time = time.time() - start_time

    logger.info(
        "request_completed",
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        process_time_ms=round(process_time * 1000, 2)
    )

    response.headers["X-Process-Time"] = str(round(process_time, 3))
    return response


async def add_security_headers(request: Request, call_next) -> Response:
    """
    Apply SECURITY_HEADERS to every response.

    The Swagger UI and ReDoc pages load their assets from a CDN, so they
    get every header except the Content-Security-Policy.
    """
    response = await call_next(request)
    docs_paths = {request.app.docs_url, request.app.redoc_url} - {None}
    for header, value in SECURITY_HEADERS.items():
        if header == "Content-Security-Policy" and request.url.path in docs_paths:
            continue
        response.headers.setdefault(header, value)
    return response
