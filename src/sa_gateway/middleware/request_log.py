"""Request logging middleware.

Every request gets a request id (the caller's ``X-Request-ID`` if it sent
one), stored on ``request.state`` for the response envelope and echoed back
in the response header. Polling clients hit ``/state`` once a second, so
successful polls and health checks are logged at DEBUG; everything else at
INFO.

    INFO [POST] /api/v1/live-auction/bid -> 200 (4ms) req_a1b2c3d4e5f6
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from src.sa_common.response import new_request_id

logger = logging.getLogger("sa.request")

REQUEST_ID_HEADER = "X-Request-ID"
_QUIET_PATHS = ("/health", "/api/v1/live-auction/state")


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or new_request_id()
        request.state.request_id = request_id

        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        response.headers[REQUEST_ID_HEADER] = request_id

        quiet = request.url.path in _QUIET_PATHS and response.status_code < 400
        logger.log(
            logging.DEBUG if quiet else logging.INFO,
            "[%s] %s -> %d (%.0fms) %s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            request_id,
        )
        return response
