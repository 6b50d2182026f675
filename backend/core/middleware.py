# backend/core/middleware.py
from fastapi import Request, status
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse
import time
import uuid
from typing import Callable

from config.settings import get_settings
from config.logging import get_logger, log_api_request, log_api_response
from core.security import get_security_headers

logger = get_logger(__name__)
settings = get_settings()


# Request ID Middleware
class RequestIDMiddleware(BaseHTTPMiddleware):
    """Add unique request ID to each request."""

    async def dispatch(self, request: Request, call_next: Callable):
        request_id = request.headers.get("X-Request-Id") or str(uuid.uuid4())
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers["X-Request-Id"] = request_id

        return response


# Logging Middleware
class LoggingMiddleware(BaseHTTPMiddleware):
    """Log all API requests and responses."""

    def __init__(self, app, skip_paths: list = None):
        super().__init__(app)
        self.skip_paths = skip_paths or ["/health", "/docs", "/openapi.json", "/redoc"]

    async def dispatch(self, request: Request, call_next: Callable):
        if any(request.url.path.startswith(path) for path in self.skip_paths):
            return await call_next(request)

        start_time = time.time()
        request_id = getattr(request.state, "request_id", "unknown")

        log_api_request(
            request_id=request_id,
            method=request.method,
            path=request.url.path
        )

        try:
            response = await call_next(request)
            duration = time.time() - start_time

            log_api_response(
                request_id=request_id,
                status_code=response.status_code,
                duration=duration
            )
            response.headers["X-Process-Time"] = f"{duration:.3f}"

            return response

        except Exception as e:
            duration = time.time() - start_time
            logger.error(f"Request {request_id} failed after {duration:.3f}s: {str(e)}")
            raise


# Security Headers Middleware
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next: Callable):
        response = await call_next(request)

        for header, value in get_security_headers().items():
            response.headers.setdefault(header, value)

        return response


# Error Handling Middleware
class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Turn unhandled errors into the uniform error body."""

    async def dispatch(self, request: Request, call_next: Callable):
        try:
            return await call_next(request)
        except Exception as e:
            logger.exception(f"Unhandled error in {request.method} {request.url.path}: {str(e)}")
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "error": True,
                    "error_code": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred",
                    "status_code": status.HTTP_500_INTERNAL_SERVER_ERROR,
                    "request_id": getattr(request.state, "request_id", "unknown")
                }
            )


__all__ = [
    "RequestIDMiddleware",
    "LoggingMiddleware",
    "SecurityHeadersMiddleware",
    "ErrorHandlingMiddleware"
]
