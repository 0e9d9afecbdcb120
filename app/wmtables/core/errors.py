import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.wmtables.core.error_catalog import AppError, ErrorCatalog, ErrorDefinition
from app.wmtables.engine.errors import TableEngineError, UnknownActionError

logger = logging.getLogger(__name__)

_HTTP_STATUS_CODES = {
    400: "BAD_REQUEST",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    413: "PAYLOAD_TOO_LARGE",
}

# request body sections that never name a field of their own
_LOCATION_ROOTS = {"body", "query", "path", "header"}


def _trace_id(request: Request) -> str:
    return getattr(request.state, "trace_id", "")


def _remember(request: Request, code: str, exc: Exception) -> None:
    request.state.error_code = code
    request.state.error_class = exc.__class__.__name__


def _json_safe(value):
    if isinstance(value, dict):
        return {str(key): _json_safe(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(item) for item in value]
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    return str(value)


def error_response(request: Request, error: ErrorDefinition, details: object = None) -> JSONResponse:
    return JSONResponse(
        status_code=error.status_code,
        content={
            "code": error.code,
            "message": error.message,
            "details": _json_safe(details),
            "trace_id": _trace_id(request),
        },
    )


def _validation_errors(exc: RequestValidationError) -> list[dict]:
    errors = []
    for error in exc.errors():
        loc = list(error.get("loc", []))
        field = ".".join(str(item) for item in loc if item not in _LOCATION_ROOTS) or None
        errors.append(
            {
                "field": field,
                "message": error.get("msg", "Invalid value"),
                "type": error.get("type", "validation_error"),
                "loc": loc,
                "input": _json_safe(error.get("input")),
                "ctx": _json_safe(error.get("ctx")),
            }
        )
    return errors


def _engine_error(exc: TableEngineError) -> tuple[ErrorDefinition, dict | None]:
    if isinstance(exc, UnknownActionError):
        return ErrorCatalog.TABLE_UNKNOWN_ACTION, {"kind": exc.kind, "type": exc.key}
    return ErrorCatalog.INTERNAL_ERROR, {"type": exc.__class__.__name__}


def setup_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        _remember(request, exc.error.code, exc)
        return error_response(request, exc.error, exc.details)

    @app.exception_handler(TableEngineError)
    async def table_engine_error_handler(request: Request, exc: TableEngineError):
        error, details = _engine_error(exc)
        _remember(request, error.code, exc)
        return error_response(request, error, details)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        code = _HTTP_STATUS_CODES.get(exc.status_code, "HTTP_ERROR")
        _remember(request, code, exc)
        detail = exc.detail
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "code": code,
                "message": str(detail) if detail is not None else "HTTP error",
                "details": None,
                "trace_id": _trace_id(request),
            },
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        _remember(request, ErrorCatalog.VALIDATION_ERROR.code, exc)
        return error_response(request, ErrorCatalog.VALIDATION_ERROR, {"errors": _validation_errors(exc)})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        _remember(request, ErrorCatalog.INTERNAL_ERROR.code, exc)
        logger.exception("unhandled error on %s", request.url.path)
        return error_response(request, ErrorCatalog.INTERNAL_ERROR, {"type": exc.__class__.__name__})
