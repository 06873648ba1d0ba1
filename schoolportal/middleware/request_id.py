# middleware/request_id.py
import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from schoolportal.core.logging import logger

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Stamp every request with an id, reusing the caller's when given"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ):
        request.state.request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        started = time.perf_counter()
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request.state.request_id
        logger.debug(
            f"{request.method} {request.url.path} -> {response.status_code} "
            f"in {(time.perf_counter() - started) * 1000:.1f}ms",
            extra={
                "request_id": request.state.request_id,
                "user_id": getattr(request.state, "user_id", None)
            }
        )
        return response
