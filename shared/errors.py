# shared/errors.py
from datetime import datetime, timezone
from http import HTTPStatus

from fastapi import Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError


class ServiceError(Exception):
    """Base class for failures raised by the service layer.

    Each subclass maps to one HTTP status and a stable ``error_code`` so that
    callers can tell bad input, missing records and scheduling conflicts apart.
    """

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR
    error_code = "INTERNAL_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    status_code = HTTPStatus.BAD_REQUEST
    error_code = "VALIDATION_ERROR"


class NotFoundError(ServiceError):
    status_code = HTTPStatus.NOT_FOUND
    error_code = "RESOURCE_NOT_FOUND"

    def __init__(self, resource: str, field: str, value):
        super().__init__(f"{resource} not found with {field}: {value}")
        self.resource = resource
        self.field = field
        self.value = value


class ConflictError(ServiceError):
    """A proposed session overlaps an existing session of the same teacher."""

    status_code = HTTPStatus.CONFLICT
    error_code = "SCHEDULING_CONFLICT"


class DuplicateResourceError(ServiceError):
    status_code = HTTPStatus.CONFLICT
    error_code = "RESOURCE_ALREADY_EXISTS"

    def __init__(self, resource: str, field: str, value):
        super().__init__(f"{resource} already exists with {field}: {value}")
        self.resource = resource
        self.field = field
        self.value = value


class OperationNotAllowedError(ServiceError):
    status_code = HTTPStatus.FORBIDDEN
    error_code = "OPERATION_NOT_ALLOWED"


class AuthenticationError(ServiceError):
    status_code = HTTPStatus.UNAUTHORIZED
    error_code = "AUTHENTICATION_ERROR"


def _error_body(request: Request, status: HTTPStatus, message: str, error_code: str) -> dict:
    return {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "status": status.value,
        "error": status.phrase,
        "message": message,
        "error_code": error_code,
        "path": request.url.path,
    }


async def service_error_handler(request: Request, exc: ServiceError):
    status = HTTPStatus(exc.status_code)
    return JSONResponse(
        status_code=status.value,
        content=_error_body(request, status, exc.message, exc.error_code),
    )


async def integrity_error_handler(request: Request, exc: IntegrityError):
    status = HTTPStatus.CONFLICT
    return JSONResponse(
        status_code=status.value,
        content=_error_body(
            request, status, f"Data integrity violation: {exc.orig}", "DATA_INTEGRITY_VIOLATION"
        ),
    )
