# app/core/exceptions.py
"""Service-layer failures rendered as structured API errors"""
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import logging

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Base class for expected, user-facing service failures"""
    kind = "error"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"success": False, "error": self.kind, "message": self.message}


class ValidationError(ServiceError):
    """Malformed or missing input"""
    kind = "validation_error"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class NotFoundError(ServiceError):
    """Referenced organization, appointment or type does not exist"""
    kind = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class PermissionDeniedError(ServiceError):
    """Actor lacks the role or ownership the operation requires"""
    kind = "permission_denied"
    status_code = status.HTTP_403_FORBIDDEN


class ConflictError(ServiceError):
    """Unique-constraint violation or a redundant/terminal status change"""
    kind = "conflict"
    status_code = status.HTTP_409_CONFLICT


async def service_error_handler(request: Request, exc: ServiceError):
    correlation_id = getattr(request.state, "correlation_id", "unknown")
    logger.info(
        f"{exc.kind}: {exc.message}",
        extra={"correlation_id": correlation_id, "url": str(request.url)},
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def request_validation_handler(request: Request, exc: RequestValidationError):
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid fields!")
    if location:
        message = f"{location}: {message}"
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=ValidationError(message).to_dict(),
    )


def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
