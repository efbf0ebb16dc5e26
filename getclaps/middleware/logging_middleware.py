"""
Request Logging Middleware
One line when a clap or dashboard request arrives and one when it is answered.
"""

import time
import logging
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

QUIET_PATHS = ("/api/health", "/health")


def _describe(request: Request) -> str:
    client = request.client.host if request.client else "unknown"
    return f"{request.method} {request.url.path} ({client}, origin {request.headers.get('origin', '-')})"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs claps and dashboard traffic with its duration in `X-Process-Time`."""

    async def dispatch(self, request: Request, call_next):
        if request.method == "OPTIONS" or request.url.path in QUIET_PATHS:
            return await call_next(request)

        described = _describe(request)
        logger.info(f"→ {described}")
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(f"✗ {described} raised {type(e).__name__} after {time.perf_counter() - started:.3f}s")
            raise

        elapsed = time.perf_counter() - started
        logger.info(f"← {described} [{response.status_code}] {elapsed:.3f}s")
        response.headers["X-Process-Time"] = f"{elapsed:.6f}"
        return response
