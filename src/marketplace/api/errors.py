"""Structured JSON rendering for every failure the API can surface.

Body shape: ``{"error": code, "message": str, "details": {...}}``. Request
validation failures keep FastAPI's 422 status but use the same body, with
``details`` keyed by the offending field.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import InvalidOperationError, ObjectNotFoundError, ValidationError

from marketplace.shared.errors import MarketplaceError

logger = structlog.get_logger(__name__)


def _error_response(status_code: int, code: str, message: str, details: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": code, "message": message, "details": details or {}},
    )


_LOCATIONS = ("body", "query", "header", "path", "cookie")


def _field_errors(errors) -> dict[str, list[str]]:
    details: dict[str, list[str]] = {}
    for error in errors:
        loc = [str(part) for part in error.get("loc", ())]
        field = ".".join(part for part in loc if part not in _LOCATIONS) or (loc[-1] if loc else "request")
        details.setdefault(field, []).append(error.get("msg", "Invalid value"))
    return details


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(MarketplaceError)
    async def marketplace_error(request: Request, exc: MarketplaceError) -> JSONResponse:
        logger.info("request_failed", path=request.url.path, error=exc.code, status_code=exc.status_code)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(ValidationError)
    async def validation_error(request: Request, exc: ValidationError) -> JSONResponse:
        logger.info("request_invalid", path=request.url.path, details=exc.messages)
        return _error_response(400, "validation_error", "Invalid input", exc.messages)

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        details = _field_errors(exc.errors())
        logger.info("request_invalid", path=request.url.path, details=details)
        return _error_response(422, "validation_error", "Invalid request", details)

    @app.exception_handler(ObjectNotFoundError)
    async def object_not_found(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
        return _error_response(404, "not_found", str(exc))

    @app.exception_handler(InvalidOperationError)
    async def invalid_operation(request: Request, exc: InvalidOperationError) -> JSONResponse:
        return _error_response(409, "invalid_state", str(exc))
