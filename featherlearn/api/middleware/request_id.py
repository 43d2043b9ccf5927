"""
Request ID middleware for request correlation.

- Accepts X-Request-ID from the client or generates one
- Exposes it on request.state and the response headers
- Binds it (and later the authenticated user) into logging context
"""

import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from featherlearn.config import get_settings
from featherlearn.logging_config import get_logger, request_id_var, user_id_var

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Assign a request ID and warn about requests slower than slow_request_ms."""

    def __init__(self, app, slow_request_ms: int | None = None):
        super().__init__(app)
        self.slow_request_ms = slow_request_ms or get_settings().slow_request_ms

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        rid_token = request_id_var.set(request_id)
        uid_token = user_id_var.set(None)

        try:
            start = time.perf_counter()
            response = await call_next(request)
            duration_ms = (time.perf_counter() - start) * 1000

            response.headers[REQUEST_ID_HEADER] = request_id

            if duration_ms > self.slow_request_ms:
                logger.warning(
                    "Slow request",
                    extra={
                        "path": request.url.path,
                        "method": request.method,
                        "status": response.status_code,
                        "duration_ms": round(duration_ms, 1),
                    },
                )
            else:
                logger.debug(
                    "%s %s -> %s",
                    request.method,
                    request.url.path,
                    response.status_code,
                    extra={"duration_ms": round(duration_ms, 1)},
                )
            return response
        finally:
            user_id_var.reset(uid_token)
            request_id_var.reset(rid_token)
