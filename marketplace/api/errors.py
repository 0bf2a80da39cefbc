"""
Mapping of application and store failures onto HTTP error responses.

Every error body has the shape ``{"message": str, "code": str | null}``.
"""
import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import (
    DBAPIError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
)

from marketplace.api.schemas.common import ErrorResponse
from marketplace.application.errors import MarketplaceError, UpstreamError

logger = structlog.get_logger(__name__)


def _error_response(status_code: int, message: str, code: str | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(message=message, code=code).model_dump(),
    )


def to_upstream_error(exc: SQLAlchemyError) -> UpstreamError:
    """Translate a store failure, keeping the driver's SQLSTATE as the code when present."""
    code = None
    if isinstance(exc, DBAPIError):
        code = getattr(exc.orig, "sqlstate", None) or getattr(exc.orig, "pgcode", None)
    code = code or type(exc).__name__

    if isinstance(exc, IntegrityError):
        status_code = status.HTTP_409_CONFLICT
    elif isinstance(exc, (OperationalError, InterfaceError)):
        status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    else:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    message = str(exc.orig) if isinstance(exc, DBAPIError) else str(exc)
    return UpstreamError(message, status_code=status_code, code=code)


async def marketplace_error_handler(request: Request, exc: MarketplaceError) -> JSONResponse:
    log = logger.warning if exc.status_code < 500 else logger.error
    log("request_failed", status_code=exc.status_code, message=exc.message, code=exc.code)
    return _error_response(exc.status_code, exc.message, exc.code)


async def store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    upstream = to_upstream_error(exc)
    logger.error(
        "store_operation_failed",
        status_code=upstream.status_code,
        code=upstream.code,
        error=upstream.message,
    )
    return _error_response(upstream.status_code, upstream.message, upstream.code)


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    field = "body"
    if errors:
        loc = [str(part) for part in errors[0].get("loc", ()) if part not in ("body", "query")]
        field = ".".join(loc) or field
    logger.warning("request_invalid", field=field)
    return _error_response(status.HTTP_400_BAD_REQUEST, f"Invalid {field}", "InvalidRequest")


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(MarketplaceError, marketplace_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(SQLAlchemyError, store_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, request_validation_handler)  # type: ignore[arg-type]
