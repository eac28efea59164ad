from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.context import get_correlation_id


logger = logging.getLogger("app.request")


@dataclass
class ErrorEnvelope:
    code: str
    message: str
    details: Any
    correlation_id: str | None


class FieldValidationError(Exception):
    """Raised by request adapters with a ``{field: message}`` mapping."""

    def __init__(self, fields: dict[str, str]) -> None:
        self.fields = fields
        super().__init__("validation error")


def error_response(
    request: Request,
    *,
    status_code: int,
    code: str,
    message: str,
    details: Any = None,
) -> JSONResponse:
    correlation_id = get_correlation_id() or getattr(request.state, "correlation_id", None)
    payload = ErrorEnvelope(code=code, message=message, details=details, correlation_id=correlation_id)
    return JSONResponse(status_code=status_code, content=asdict(payload))


def validation_error_response(request: Request, fields: dict[str, str]) -> JSONResponse:
    return error_response(
        request,
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        code="validation_error",
        message="validation error",
        details=fields,
    )


def field_errors(errors: list[dict[str, Any]]) -> dict[str, str]:
    """Flatten pydantic error entries into ``{field: message}``.

    The location prefix (``body``, ``query``, ``path``) is dropped; the first
    error reported for a field wins.
    """
    fields: dict[str, str] = {}
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part not in {"body", "query", "path"}]
        name = ".".join(loc) or "request"
        fields.setdefault(name, str(error.get("msg", "invalid value")))
    return fields


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = field_errors(list(exc.errors()))
    logger.warning(
        "http.validation_error",
        extra={"method": request.method, "path": request.url.path, "error": str(fields)},
    )
    return validation_error_response(request, fields)


async def _field_validation_handler(request: Request, exc: FieldValidationError) -> JSONResponse:
    logger.warning(
        "http.validation_error",
        extra={"method": request.method, "path": request.url.path, "error": str(exc.fields)},
    )
    return validation_error_response(request, exc.fields)


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "http.unhandled_error",
        exc_info=exc,
        extra={"method": request.method, "path": request.url.path, "error": str(exc)},
    )
    response = error_response(
        request,
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        code="internal_error",
        message="internal server error",
    )
    correlation_id = getattr(request.state, "correlation_id", None)
    if correlation_id:
        response.headers["x-correlation-id"] = correlation_id
    return response


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, _request_validation_handler)  # type: ignore[arg-type]
    app.add_exception_handler(FieldValidationError, _field_validation_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _unhandled_error_handler)
