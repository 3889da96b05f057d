"""Global exception handlers.

Domain errors are mapped to HTTP status codes by their ErrorKind only;
message text never decides the status.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from domain.model.errors import DomainError, ErrorKind, ShapeViolationError

logger = logging.getLogger(__name__)

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.SHAPE_VIOLATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.AGE_RESTRICTION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.DUPLICATE_EMAIL: status.HTTP_409_CONFLICT,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.REACTIVATION_FORBIDDEN: status.HTTP_409_CONFLICT,
    ErrorKind.PERSISTENCE_FAILURE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(TimeoutError, timeout_error_handler)


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    status_code = STATUS_BY_KIND[exc.kind]
    content = {"detail": str(exc), "kind": exc.kind.value}
    if isinstance(exc, ShapeViolationError):
        content["errors"] = exc.by_field()

    if status_code >= 500:
        logger.error("Domain error", extra={"kind": exc.kind.value, "path": request.url.path}, exc_info=exc)
    else:
        logger.info("Request rejected", extra={"kind": exc.kind.value, "path": request.url.path})
    return JSONResponse(status_code=status_code, content=content)


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Undecodable bodies are reported like rule violations, grouped by field."""
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        loc = [str(part) for part in error["loc"] if part != "body"]
        errors.setdefault(".".join(loc) or "body", []).append(error["msg"])

    logger.warning("Malformed request", extra={"path": request.url.path, "fields": list(errors)})
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Validation failed", "kind": ErrorKind.SHAPE_VIOLATION.value, "errors": errors},
    )


async def timeout_error_handler(request: Request, exc: TimeoutError) -> JSONResponse:
    logger.error("Request deadline exceeded", extra={"path": request.url.path})
    return JSONResponse(
        status_code=status.HTTP_504_GATEWAY_TIMEOUT,
        content={"detail": "Request timed out"},
    )
