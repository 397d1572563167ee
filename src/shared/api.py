"""HTTP plumbing shared by all routers.

- ``ApiResponse``: the ``{success, message, data}`` envelope for successful calls
- ``register_exception_handlers``: maps the error taxonomy to ``{success, error, message}``
- request-scoped accessors for collaborators stored on ``app.state``
"""

from typing import Generic, TypeVar

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from shared.config import Settings
from shared.database import Database
from shared.errors import NepifyError

logger = structlog.get_logger(__name__)

DataT = TypeVar("DataT")


class ApiResponse(BaseModel, Generic[DataT]):
    success: bool = True
    message: str
    data: DataT | None = None


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    message: str
    detail: str | None = None


_HTTP_ERROR_CODES = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
}


def _error_response(status_code: int, error: str, message: str, detail: str | None = None) -> JSONResponse:
    body = ErrorResponse(error=error, message=message, detail=detail)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def _format_validation_errors(exc: RequestValidationError | ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(parts) or "invalid request"


def register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    """Install handlers translating exceptions into the error envelope."""

    async def handle_domain_error(request: Request, exc: NepifyError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(
                "Request failed with internal error",
                path=request.url.path,
                error=exc.code,
                detail=exc.detail,
            )
        else:
            logger.info(
                "Request rejected",
                path=request.url.path,
                error=exc.code,
                message=exc.message,
            )

        detail = exc.detail if settings.expose_error_details else None
        return _error_response(exc.status_code, exc.code, exc.message, detail)

    async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:  # noqa: ARG001
        return _error_response(400, "validation_error", _format_validation_errors(exc))

    async def handle_command_validation(request: Request, exc: ValidationError) -> JSONResponse:
        logger.info("Command rejected", path=request.url.path, model=exc.title, errors=exc.error_count())
        return _error_response(400, "validation_error", _format_validation_errors(exc))

    async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:  # noqa: ARG001
        error = _HTTP_ERROR_CODES.get(exc.status_code, "http_error")
        return _error_response(exc.status_code, error, str(exc.detail))

    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled exception", path=request.url.path)
        detail = f"{type(exc).__name__}: {exc}" if settings.expose_error_details else None
        return _error_response(500, "internal_server_error", NepifyError.default_message, detail)

    app.add_exception_handler(NepifyError, handle_domain_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(ValidationError, handle_command_validation)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(Exception, handle_unexpected)


# ---------------------------------------------------------------------------
# Request-scoped collaborators
# ---------------------------------------------------------------------------
def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_database(request: Request) -> Database:
    return request.app.state.database
