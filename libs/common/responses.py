"""Uniform response envelope and error handlers.

Every endpoint answers with ``{"success", "data", "message"}``; error bodies
also carry a machine-readable ``kind`` and optional ``details``.
"""

from typing import Any, Generic, Optional, TypeVar

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from libs.common.errors import HTTP_STATUS_BY_KIND, DomainError
from libs.common.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    success: bool = True
    data: Optional[T] = None
    message: str = "Success"


class ErrorResponse(BaseModel):
    success: bool = False
    data: None = None
    message: str
    kind: str
    details: Optional[dict[str, Any]] = None


def ok(data: Any = None, message: str = "Success") -> dict[str, Any]:
    """Wrap a payload in the success envelope."""
    return {"success": True, "data": data, "message": message}


def _error_response(
    status_code: int,
    message: str,
    kind: str,
    details: Optional[dict[str, Any]] = None,
    headers: Optional[dict[str, str]] = None,
) -> JSONResponse:
    body = ErrorResponse(message=message, kind=kind, details=details)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json"),
        headers=headers,
    )


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    status_code = HTTP_STATUS_BY_KIND.get(exc.kind, status.HTTP_400_BAD_REQUEST)
    logger.info(
        "%s %s -> %s (%s): %s",
        request.method,
        request.url.path,
        status_code,
        exc.kind.value,
        exc.message,
    )
    return _error_response(status_code, exc.message, exc.kind.value, exc.details)


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"{field}: {first.get('msg')}" if field else "Invalid request"
    return _error_response(
        status.HTTP_400_BAD_REQUEST,
        message,
        "validation",
        {"errors": [{"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in errors]},
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    kind = {
        401: "authentication",
        403: "authorization",
        404: "not_found",
    }.get(exc.status_code, "validation" if exc.status_code < 500 else "internal")
    return _error_response(
        exc.status_code,
        str(exc.detail),
        kind,
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "Unhandled error on %s %s", request.method, request.url.path, exc_info=exc
    )
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error", "internal"
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
