"""
Middleware components:
- Request ID injection (bound into the structlog context of the request)
- Request timing/logging
"""

import time
import uuid
from typing import Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from wpaudit.core.logging import get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tags every log line of a request with its id and logs the outcome."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:8]
        request.state.request_id = request_id

        with structlog.contextvars.bound_contextvars(request_id=request_id):
            started = time.perf_counter()
            response = await call_next(request)
            elapsed_ms = round((time.perf_counter() - started) * 1000)

            log = logger.warning if response.status_code >= 500 else logger.info
            log(
                "Request handled",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=elapsed_ms,
            )

        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers["X-Response-Time"] = f"{elapsed_ms}ms"
        return response
