"""Global exception handlers: BarterError -> structured envelope, anything else -> opaque 500."""
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from skillbarter.constants import ERR_INTERNAL, TRANSIENT_RETRY_AFTER_SECONDS
from skillbarter.errors import BarterError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""

    @app.exception_handler(BarterError)
    async def barter_error_handler(request: Request, exc: BarterError) -> JSONResponse:
        request_id = getattr(request.state, "request_id", "")
        logger.warning(
            "[%s] %s %s -> %s %s: %s",
            request_id, request.method, request.url.path, exc.http_status, exc.code, exc.message,
        )
        headers = {"Retry-After": str(TRANSIENT_RETRY_AFTER_SECONDS)} if exc.retryable else None
        return JSONResponse(status_code=exc.http_status, content=exc.to_response(request_id), headers=headers)

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all — never leaks internal details."""
        request_id = getattr(request.state, "request_id", "")
        logger.error("[%s] Unhandled exception on %s", request_id, request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={"detail": {
                "code": ERR_INTERNAL,
                "message": "Something went wrong. Please try again.",
                "request_id": request_id,
            }},
        )
