"""
Coleta Backend — Access Log Middleware
========================================

What:  One access-log line per request on the "coleta.access" logger.
Why:   uvicorn's access log has neither the request id nor the handler duration.

Line format:
    POST /weighings -> 201 (12.4ms) rid=1a2b3c4d

Level by status: 5xx ERROR, 4xx WARNING, otherwise INFO.
GET /health is skipped; container probes call it every few seconds.
Bodies are never logged (login carries CPF and password).
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.middleware.request_id import request_id_var

logger = logging.getLogger("coleta.access")

QUIET_PATHS = frozenset({"/health"})


def level_for_status(status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        logger.log(
            level_for_status(response.status_code),
            "%s %s -> %d (%.1fms) rid=%s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            request_id_var.get(""),
        )
        return response
