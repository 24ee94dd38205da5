import time
import uuid
from typing import Callable, Optional, Sequence

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from dyntables.core.logging import get_logger

logger = get_logger(__name__)

LOG_EXCLUDE_PATHS = ("/health", "/docs", "/redoc", "/openapi.json")


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Request/response logging with a request id and processing time
    added to every response.
    """

    def __init__(self, app, exclude_paths: Optional[Sequence[str]] = None):
        super().__init__(app)
        self.exclude_paths = tuple(exclude_paths or LOG_EXCLUDE_PATHS)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path.startswith(self.exclude_paths):
            return await call_next(request)

        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        start_time = time.time()

        logger.info(
            f"{request.method} {request.url.path}",
            extra={"request_id": request_id, "tenant": request.headers.get("X-Company")},
        )

        try:
            response = await call_next(request)
        except Exception:
            process_time = time.time() - start_time
            logger.exception(
                f"{request.method} {request.url.path} failed after {process_time:.4f}s",
                extra={"request_id": request_id},
            )
            raise

        process_time = time.time() - start_time
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} in {process_time:.4f}s",
            extra={"request_id": request_id},
        )
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = str(round(process_time, 4))
        return response
