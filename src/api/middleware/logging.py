"""Per-request log context and access logging."""

import time
import uuid
from collections.abc import Awaitable, Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from src.config import get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Binds request_id, method and path into structlog contextvars.

    Stock rejections, numbering retries and rollbacks logged further down
    the stack therefore carry the request they belong to. The request ID
    is taken from the X-Request-ID header when the caller sends one and is
    echoed back on the response.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:8]
        request.state.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        started = time.perf_counter()

        def elapsed_ms() -> float:
            return round((time.perf_counter() - started) * 1000, 2)

        logger.debug("request_started")
        try:
            response = await call_next(request)
        except Exception as e:
            logger.error("request_failed", error=str(e), duration_ms=elapsed_ms())
            raise

        duration_ms = elapsed_ms()
        logger.info("request_completed", status=response.status_code, duration_ms=duration_ms)

        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"
        return response
