"""
Custom exceptions for the restaurant admin backend.
Handles HTTP exceptions, validation errors, upstream (remote API) errors and
report/print failures.
"""

from typing import Any, Dict, Optional, List
from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from config.logging import get_logger

logger = get_logger(__name__)


class ErrorDetail(BaseModel):
    """Standard error detail structure"""
    code: str
    message: str
    field: Optional[str] = None
    details: Optional[Dict[str, Any]] = None


class BaseCustomException(HTTPException):
    """Base class for all custom exceptions"""

    def __init__(
        self,
        status_code: int,
        detail: str,
        headers: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None,
        field: Optional[str] = None
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code
        self.field = field


# =============================================================================
# HTTP EXCEPTIONS
# =============================================================================

class NotFoundError(BaseCustomException):
    """Resource not found exception"""

    def __init__(self, resource: str, identifier: str):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{resource} with identifier '{identifier}' not found",
            error_code="RESOURCE_NOT_FOUND"
        )


class UnauthorizedError(BaseCustomException):
    """Unauthorized access exception"""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=message,
            error_code="UNAUTHORIZED",
            headers={"WWW-Authenticate": "Bearer"}
        )


class ForbiddenError(BaseCustomException):
    """Forbidden access exception"""

    def __init__(self, message: str = "Access denied"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=message,
            error_code="FORBIDDEN"
        )


class BadRequestError(BaseCustomException):
    """Bad request exception"""

    def __init__(self, message: str, field: str = None):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=message,
            error_code="BAD_REQUEST",
            field=field
        )


class ServiceUnavailableError(BaseCustomException):
    """Service unavailable exception"""

    def __init__(self, service: str = "Service"):
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"{service} is temporarily unavailable",
            error_code="SERVICE_UNAVAILABLE"
        )


# =============================================================================
# VALIDATION ERRORS
# =============================================================================

class ValidationError(BaseCustomException):
    """Base validation error"""

    def __init__(self, message: str, field: str = None, errors: List[ErrorDetail] = None):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=message,
            error_code="VALIDATION_ERROR",
            field=field
        )
        self.errors = errors or []


class WizardStepError(ValidationError):
    """A wizard step was submitted out of order or with invalid data"""

    def __init__(self, step: str, message: str, errors: List[ErrorDetail] = None):
        super().__init__(message=message, field=step, errors=errors)
        self.error_code = "INVALID_WIZARD_STEP"


class ReportDataError(ValidationError):
    """The remote API returned report data that cannot be interpreted"""

    def __init__(self, field: str, value: Any, reason: str = "Monetary and count fields must be numeric"):
        super().__init__(
            message=f"Report field '{field}' has an invalid value",
            field=field,
            errors=[
                ErrorDetail(
                    code="INVALID_REPORT_VALUE",
                    message=reason,
                    field=field,
                    details={"provided_value": str(value)}
                )
            ]
        )
        self.error_code = "INVALID_REPORT_DATA"


# =============================================================================
# UPSTREAM / INFRASTRUCTURE ERRORS
# =============================================================================

class ExternalServiceError(ServiceUnavailableError):
    """The remote API could not be reached"""

    def __init__(self, service_name: str, operation: str = None):
        super().__init__(service=service_name)
        if operation:
            self.detail = f"External service {service_name} failed during {operation}"
        self.error_code = "EXTERNAL_SERVICE_ERROR"


class UpstreamRequestError(BaseCustomException):
    """The remote API answered with an error status; its status is passed through"""

    def __init__(self, status_code: int, message: str, path: str = None):
        super().__init__(
            status_code=status_code,
            detail=message,
            error_code="UPSTREAM_REQUEST_FAILED"
        )
        self.path = path


class PrintServiceError(ServiceUnavailableError):
    """A print job could not be handed to the print service"""

    def __init__(self, reason: str):
        super().__init__(service="Print service")
        self.detail = f"Print job failed: {reason}"
        self.error_code = "PRINT_FAILED"


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

def format_error_response(error: HTTPException) -> Dict[str, Any]:
    """Format error response for consistent API responses"""
    response = {
        "error": True,
        "error_code": getattr(error, 'error_code', None) or 'HTTP_ERROR',
        "message": error.detail,
        "status_code": error.status_code
    }

    if getattr(error, 'field', None):
        response["field"] = error.field

    if getattr(error, 'errors', None):
        response["errors"] = [
            {
                "code": err.code,
                "message": err.message,
                "field": err.field,
                "details": err.details
            } for err in error.errors
        ]

    return response


async def custom_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Render every HTTPException with the uniform error body"""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content=format_error_response(exc),
        headers=getattr(exc, "headers", None)
    )


def error_details(errors: List[Dict[str, Any]]) -> List[ErrorDetail]:
    """Convert pydantic/FastAPI validation errors into ErrorDetail entries"""
    return [
        ErrorDetail(
            code=str(err.get("type", "invalid")).upper(),
            message=err.get("msg", "Invalid value"),
            field=".".join(str(part) for part in err.get("loc", ())),
        )
        for err in errors
    ]


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render request validation failures with the uniform error body"""
    error = ValidationError("Invalid request parameters", errors=error_details(exc.errors()))
    return JSONResponse(status_code=error.status_code, content=format_error_response(error))
