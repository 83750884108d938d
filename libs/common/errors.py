"""Closed error taxonomy for business operations.

Business code raises ``DomainError`` subclasses only. The gateway maps each
``ErrorKind`` to an HTTP status, so callers switch on ``kind`` and never on
message text.

Usage:
    from libs.common.errors import NotFoundError

    raise NotFoundError("Order not found", order_id=str(order_id))
"""

import enum
from typing import Any, Optional


class ErrorKind(str, enum.Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    INVALID_STATE = "invalid_state"


class DomainError(Exception):
    kind: ErrorKind = ErrorKind.VALIDATION

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details: Optional[dict[str, Any]] = details or None

    def __repr__(self) -> str:
        return f"<{type(self).__name__} kind={self.kind.value} {self.message!r}>"


class ValidationError(DomainError):
    kind = ErrorKind.VALIDATION


class NotFoundError(DomainError):
    kind = ErrorKind.NOT_FOUND


class ConflictError(DomainError):
    kind = ErrorKind.CONFLICT


class AuthenticationError(DomainError):
    kind = ErrorKind.AUTHENTICATION


class AuthorizationError(DomainError):
    kind = ErrorKind.AUTHORIZATION


class InvalidStateError(DomainError):
    kind = ErrorKind.INVALID_STATE


HTTP_STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.CONFLICT: 400,
    ErrorKind.INVALID_STATE: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.AUTHENTICATION: 401,
    ErrorKind.AUTHORIZATION: 403,
}
