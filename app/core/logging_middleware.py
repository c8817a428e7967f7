import logging
import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.config import settings
from app.core.context import set_request_id

logger = logging.getLogger("app.middleware")

REQUEST_ID_HEADER = "X-Request-ID"

# No latency lines for these
QUIET_PATHS = frozenset({"/health"})


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Tags every request with an id (the caller's ``X-Request-ID`` when sent)
    and, when latency logging is on, writes one line per finished request.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        set_request_id(request_id)

        started = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        except Exception as e:
            logger.error(f"Unhandled error on {request.method} {request.url.path}: {e}", exc_info=True)
            raise
        finally:
            if settings.ENABLE_LATENCY_LOGS and request.url.path not in QUIET_PATHS:
                level = logging.WARNING if status_code >= 500 else logging.INFO
                logger.log(
                    level,
                    "Request finished",
                    extra={
                        "method": request.method,
                        "path": request.url.path,
                        "status_code": status_code,
                        "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                        "client_ip": request.client.host if request.client else None,
                    },
                )
