"""Request logging middleware.

Logs every HTTP request with method, path, status code, latency, cache
outcome and a short request ID for correlation. The request_id is injected
into request.state so handlers, exception handlers and the cache replay all
stamp the same id into the response envelope; it is also echoed back in the
X-Request-ID header.

Log format:
    INFO [GET] /api/notes → 200 (4ms) cache=HIT req_a1b2c3d4e5f6
"""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("mn.request")


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request.state.request_id = f"req_{uuid.uuid4().hex[:12]}"

        start = time.perf_counter()
        try:
            response: Response = await call_next(request)
        except Exception:
            elapsed_ms = (time.perf_counter() - start) * 1000
            logger.exception(
                "[%s] %s → unhandled error (%.0fms) %s",
                request.method,
                request.url.path,
                elapsed_ms,
                request.state.request_id,
            )
            raise
        elapsed_ms = (time.perf_counter() - start) * 1000

        response.headers["X-Request-ID"] = request.state.request_id
        logger.info(
            "[%s] %s → %d (%.0fms) cache=%s %s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            response.headers.get("X-Cache", "-"),
            request.state.request_id,
        )
        return response
