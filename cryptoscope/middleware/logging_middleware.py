"""
HTTP request logging middleware.

One log line per request: method, path, status, duration, and for tool
invocations the tool name. Request id and tool name are bound into structlog
contextvars so provider and executor logs for the same call carry them too.
"""

import time
import uuid
from typing import Callable, Optional

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.stdlib.get_logger("http")

TOOLS_PREFIX = "/tools/"
REQUEST_ID_HEADER = "x-request-id"


def tool_name_from_path(path: str) -> Optional[str]:
    if path.startswith(TOOLS_PREFIX):
        return path[len(TOOLS_PREFIX):].strip("/") or None
    return None


def _log_method(status_code: int) -> Callable[..., None]:
    if status_code >= 500:
        return logger.error
    if status_code >= 400:
        return logger.warning
    return logger.info


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log HTTP requests with timing, status and tool info."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:8]
        tool = tool_name_from_path(request.url.path)

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)
        if tool:
            structlog.contextvars.bind_contextvars(tool=tool)

        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            _log_method(status_code)(
                "http_request",
                method=request.method,
                path=request.url.path,
                status=status_code,
                rate_limited=status_code == 429,
                duration_ms=round((time.perf_counter() - start) * 1000, 1),
            )
