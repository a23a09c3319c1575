# app/core/middleware.py
"""Request tracing and access logging"""
import uuid
import time
import logging
from starlette.requests import Request

logger = logging.getLogger(__name__)

QUIET_PATH_PREFIXES = ("/health",)


async def correlation_id_middleware(request: Request, call_next):
    """Attach a correlation ID to the request and echo it on the response"""
    correlation_id = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())
    request.state.correlation_id = correlation_id

    response = await call_next(request)
    response.headers["X-Correlation-ID"] = correlation_id
    return response


async def request_logging_middleware(request: Request, call_next):
    """One access log line per request; health probes are logged at DEBUG"""
    start_time = time.perf_counter()
    correlation_id = getattr(request.state, "correlation_id", "unknown")

    response = await call_next(request)

    duration_ms = round((time.perf_counter() - start_time) * 1000, 2)
    level = logging.DEBUG if request.url.path.startswith(QUIET_PATH_PREFIXES) else logging.INFO
    logger.log(
        level,
        f"{request.method} {request.url.path} -> {response.status_code} ({duration_ms} ms)",
        extra={
            "correlation_id": correlation_id,
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": duration_ms,
            "client": request.client.host if request.client else "unknown",
        }
    )
    response.headers["X-Response-Time-Ms"] = str(duration_ms)

    return response
