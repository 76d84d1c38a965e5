import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class LoggingMiddleware(BaseHTTPMiddleware):
    """Tags each request with an id and logs method, path, status and duration."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:8]
        request.state.request_id = request_id
        start = time.monotonic()

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "[%s] %s %s -> unhandled error",
                request_id,
                request.method,
                request.url.path,
            )
            raise

        duration = time.monotonic() - start
        response.headers[REQUEST_ID_HEADER] = request_id
        logger.info(
            "[%s] %s %s -> %s (%.2fs)",
            request_id,
            request.method,
            request.url.path,
            response.status_code,
            duration,
        )

        return response
