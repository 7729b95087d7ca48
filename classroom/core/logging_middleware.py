import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger("classroom.request")


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
        start = time.monotonic()

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "[%s] %s %s -> unhandled error (%.2fs)",
                request_id,
                request.method,
                request.url.path,
                time.monotonic() - start,
            )
            raise

        duration = time.monotonic() - start
        logger.info(
            "[%s] %s %s -> %s (%.2fs)",
            request_id,
            request.method,
            request.url.path,
            response.status_code,
            duration,
        )

        response.headers["X-Request-Id"] = request_id
        return response
