import logging
from typing import Any, Dict, Iterable, Mapping

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from ...domain.errors import AppError, ValidationFailed

logger = logging.getLogger(__name__)


def field_errors(errors: Iterable[Mapping[str, Any]]) -> Dict[str, str]:
    """Collapse pydantic error entries into one message per client-facing field."""
    result: Dict[str, str] = {}
    for error in errors:
        names = [str(part) for part in error.get("loc", ()) if isinstance(part, str)]
        names = [name for name in names if name not in {"body", "query", "path", "form"}]
        key = ".".join(names) or "request"
        result.setdefault(key, str(error.get("msg", "Invalid value")))
    return result


def validation_failed(exc: ValidationError) -> ValidationFailed:
    return ValidationFailed(errors=field_errors(exc.errors()))


def _error_body(exc: AppError) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": False, "message": exc.message}
    if exc.errors:
        body["errors"] = exc.errors
    return body


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc))

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        error = ValidationFailed(errors=field_errors(exc.errors()))
        logger.info("Validation errors on %s: %s", request.url.path, error.errors)
        return JSONResponse(status_code=error.status_code, content=_error_body(error))

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "message": "Internal server error"},
        )
