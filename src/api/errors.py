"""Mapping of domain errors to HTTP error responses."""

from fastapi import HTTPException, status

from api.models.responses import ErrorCodes
from core.errors import ConflictError, NotFoundError, TransportError, ValidationError


def http_error(status_code: int, error: str, code: str, details: list[str] | None = None) -> HTTPException:
    """HTTPException carrying the standard error body."""
    return HTTPException(
        status_code=status_code,
        detail={"error": error, "code": code, "details": details or []},
    )


def to_http_exception(exc: Exception) -> HTTPException:
    """
    Translate a domain error.

    ValidationError -> 422 (code is the validation code)
    NotFoundError   -> 404
    ConflictError   -> 409
    TransportError  -> 502
    anything else   -> 500
    """
    if isinstance(exc, ValidationError):
        return http_error(status.HTTP_422_UNPROCESSABLE_ENTITY, exc.message, exc.code)
    if isinstance(exc, NotFoundError):
        return http_error(status.HTTP_404_NOT_FOUND, exc.message, ErrorCodes.NOT_FOUND)
    if isinstance(exc, ConflictError):
        return http_error(
            status.HTTP_409_CONFLICT,
            str(exc),
            ErrorCodes.CONFLICT,
            [f"expected version {exc.expected}", f"stored version {exc.actual}"],
        )
    if isinstance(exc, TransportError):
        details = [f"Data store status: {exc.status_code}"] if exc.status_code else []
        return http_error(status.HTTP_502_BAD_GATEWAY, exc.message, ErrorCodes.TRANSPORT_ERROR, details)
    return http_error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", ErrorCodes.INTERNAL_ERROR)
