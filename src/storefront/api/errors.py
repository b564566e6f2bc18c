"""Map domain failures to HTTP status codes and the error envelope."""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import (
    ExpectedVersionError,
    InvalidOperationError,
    InvalidStateError,
    ObjectNotFoundError,
    ValidationError,
)

from storefront.shared.errors import DomainError, ErrorKind, RateLimited, error_kind
from storefront.utils.logging import logger

STATUS_BY_KIND = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.BUSINESS_RULE: 400,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.RATE_LIMITED: 429,
    ErrorKind.GATEWAY: 502,
    ErrorKind.INTERNAL: 500,
}


def _message(exc: Exception) -> str:
    if isinstance(exc, DomainError):
        return exc.message
    if isinstance(exc, ValidationError):
        return "Validation failed"
    if isinstance(exc, ObjectNotFoundError):
        return "Resource not found"
    if isinstance(exc, ExpectedVersionError):
        return "The resource was modified concurrently, retry the request"
    return str(exc) or exc.__class__.__name__


def error_response(exc: Exception) -> JSONResponse:
    kind = error_kind(exc)
    status_code = STATUS_BY_KIND[kind]
    detail = getattr(exc, "messages", None)
    content = {"success": False, "message": _message(exc), "error_detail": detail}

    headers = {}
    if isinstance(exc, RateLimited) and exc.retry_after:
        headers["Retry-After"] = str(exc.retry_after)

    if status_code >= 500:
        logger.error("Request failed", kind=kind.value, error=str(exc))
    else:
        logger.info("Request rejected", kind=kind.value, status_code=status_code, error=_message(exc))
    return JSONResponse(status_code=status_code, content=content, headers=headers or None)


async def _domain_error_handler(request: Request, exc: Exception) -> JSONResponse:
    return error_response(exc)


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    detail = {}
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"] if part not in ("body", "query", "path"))
        detail.setdefault(field or "_entity", []).append(error["msg"])
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": "Invalid request", "error_detail": detail},
    )


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error", path=request.url.path)
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": "Internal server error", "error_detail": None},
    )


def register_exception_handlers(app: FastAPI) -> None:
    for exc_class in (
        ValidationError,
        ObjectNotFoundError,
        ExpectedVersionError,
        InvalidOperationError,
        InvalidStateError,
    ):
        app.add_exception_handler(exc_class, _domain_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
