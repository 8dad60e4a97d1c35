import logging
import time
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


def operation_name(request: Request) -> str:
    # Route name is the operation ("save-script", "search-scripts", ...)
    route = request.scope.get("route")
    return getattr(route, "name", None) or "-"


class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.perf_counter()
        client = request.client.host if request.client else "-"

        logger.info(f"→ {request.method} {request.url.path} | Client: {client}")

        try:
            response = await call_next(request)
        except Exception as exc:
            process_time = time.perf_counter() - start_time
            logger.error(
                f"✗ {request.method} {request.url.path} | "
                f"Error: {exc} | "
                f"Time: {process_time:.3f}s",
                exc_info=True
            )
            raise

        process_time = time.perf_counter() - start_time
        logger.info(
            f"← {request.method} {request.url.path} | "
            f"Operation: {operation_name(request)} | "
            f"Status: {response.status_code} | "
            f"Time: {process_time:.3f}s"
        )
        response.headers["X-Process-Time"] = str(process_time)
        return response
