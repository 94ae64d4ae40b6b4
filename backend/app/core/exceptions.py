"""
Service-layer errors and the request validation handler.

Services raise ``ServiceError`` subclasses; routers translate them into
``HTTPException`` using the attached ``status_code``.
"""
from typing import Any, Dict, List
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from app.models.common import FieldError
import logging

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ServiceError):
    """Referenced record does not exist"""
    status_code = status.HTTP_404_NOT_FOUND


class ForbiddenError(ServiceError):
    """Caller is authenticated but may not act on this record"""
    status_code = status.HTTP_403_FORBIDDEN


class BusinessRuleError(ServiceError):
    """Request is well-formed but violates a business rule"""
    status_code = status.HTTP_400_BAD_REQUEST


def field_errors(errors: List[Dict[str, Any]]) -> List[FieldError]:
    """Flatten pydantic/FastAPI error dicts into field + message pairs"""
    result = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        message = error.get("msg", "Invalid value")
        # pydantic prefixes messages raised from validators
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        result.append(FieldError(field=".".join(loc) or "request", message=message))
    return result


async def request_validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = field_errors(exc.errors())
    logger.info(f"Validation failed for {request.method} {request.url.path}: {len(errors)} error(s)")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "detail": "Validation failed",
            "errors": [error.model_dump() for error in errors],
        },
    )
