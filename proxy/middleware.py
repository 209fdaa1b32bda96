"""
FastAPI middleware tagging and timing relay requests.
"""
import time
import logging
from fastapi import Request

logger = logging.getLogger(__name__)

LOGGED_PREFIXES = ("/auth/", "/api/")
# Polled by the browser; logged at DEBUG only
QUIET_PATHS = frozenset({"/api/health", "/auth/status"})


async def log_requests_middleware(request: Request, call_next):
    """Log method, path, status and time to first byte of relay requests"""
    path = request.url.path
    started = time.perf_counter()
    response = await call_next(request)
    elapsed = time.perf_counter() - started

    if path.startswith(LOGGED_PREFIXES):
        level = logging.DEBUG if path in QUIET_PATHS else logging.INFO
        logger.log(level, f"{request.method} {path} - {response.status_code} - {elapsed:.3f}s")

    return response
