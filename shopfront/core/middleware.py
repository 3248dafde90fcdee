"""
Application middleware and exception handlers
Handles request ids, request logging and the error envelope
"""

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from sqlalchemy.orm.exc import StaleDataError
from typing import Any, Callable, Optional
import time
import uuid
import logging

from .config import settings
from .exceptions import ShopfrontException, InternalServerException

logger = logging.getLogger(__name__)

class RequestIDMiddleware(BaseHTTPMiddleware):
    """Add unique request ID to each request"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id

        return response

class LoggingMiddleware(BaseHTTPMiddleware):
    """Log all requests and responses"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()
        client_host = request.client.host if request.client else "unknown"

        try:
            response = await call_next(request)
        except Exception as e:
            process_time = time.time() - start_time
            logger.error(
                f"Request failed: {request.method} {request.url.path} "
                f"{str(e)} Time: {process_time:.3f}s"
            )
            raise

        process_time = time.time() - start_time
        logger.info(
            f"{request.method} {request.url.path} from {client_host} "
            f"Status: {response.status_code} "
            f"Time: {process_time:.3f}s "
            f"Request ID: {getattr(request.state, 'request_id', 'N/A')}"
        )
        response.headers["X-Process-Time"] = f"{process_time:.3f}"

        return response

def error_response(
    request: Request,
    status_code: int,
    message: str,
    error_code: Optional[str] = None,
    field: Optional[str] = None,
    headers: Optional[dict] = None,
) -> JSONResponse:
    data: dict[str, Any] = {
        "error_code": error_code,
        "request_id": getattr(request.state, "request_id", None),
    }
    if field:
        data["field"] = field
    return JSONResponse(
        status_code=status_code,
        content={"status": "error", "message": message, "data": data},
        headers=headers,
    )

async def shopfront_exception_handler(request: Request, exc: ShopfrontException) -> JSONResponse:
    return error_response(
        request, exc.status_code, str(exc.detail), exc.error_code, exc.field, exc.headers
    )

async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(
        request, exc.status_code, str(exc.detail), "HTTP_ERROR", headers=getattr(exc, "headers", None)
    )

async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    field = ".".join(location) or None
    message = first.get("msg", "Invalid request")
    if field:
        message = f"{field}: {message}"
    return error_response(request, 400, message, "VALIDATION_ERROR", field)

async def stale_data_handler(request: Request, exc: StaleDataError) -> JSONResponse:
    logger.warning(f"Concurrent modification on {request.url.path}: {exc}")
    return error_response(
        request, 409, "Resource was modified by another request, please retry",
        "CONCURRENT_MODIFICATION"
    )

async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled exception: {str(exc)}")

    # Don't expose internal errors in production
    error = InternalServerException(str(exc) if settings.DEBUG else "An unexpected error occurred")
    return await shopfront_exception_handler(request, error)

def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ShopfrontException, shopfront_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StaleDataError, stale_data_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

def setup_middleware(app: FastAPI) -> None:
    """Configure all middleware for the application"""

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=settings.CORS_ALLOW_METHODS,
        allow_headers=settings.CORS_ALLOW_HEADERS,
    )

    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
