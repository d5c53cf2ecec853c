import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger("catalog-api")

# Error body codes. Clients branch on the HTTP status; the code refines it.
VALIDATION_FAILED = "VALIDATION_FAILED"
INVALID_ARGUMENT = "INVALID_ARGUMENT"
ENTITY_NOT_FOUND = "ENTITY_NOT_FOUND"
INVALID_STATE = "INVALID_STATE"
INTERNAL_ERROR = "INTERNAL_ERROR"

_CODES_BY_STATUS = {
    400: INVALID_ARGUMENT,
    404: ENTITY_NOT_FOUND,
    409: INVALID_STATE,
}


class ApiError(HTTPException):
    code = INTERNAL_ERROR
    status_code = 500

    def __init__(self, message: str, field_errors: Optional[Dict[str, str]] = None):
        super().__init__(status_code=type(self).status_code, detail=message)
        self.field_errors = field_errors


class NotFound(ApiError):
    code = ENTITY_NOT_FOUND
    status_code = 404


class InvalidArgument(ApiError):
    code = INVALID_ARGUMENT
    status_code = 400


class InvalidState(ApiError):
    code = INVALID_STATE
    status_code = 409


def error_body(code: str, message: str, field_errors: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "code": code,
        "message": message,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if field_errors:
        body["fieldErrors"] = field_errors
    return body


def _field_name(loc) -> str:
    parts = [str(p) for p in loc if p not in ("body", "query", "path", "header", "cookie")]
    return ".".join(parts) or "request"


def install_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if isinstance(exc, ApiError):
            code, field_errors = exc.code, exc.field_errors
        else:
            code, field_errors = _CODES_BY_STATUS.get(exc.status_code, f"HTTP_{exc.status_code}"), None
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(code, str(exc.detail), field_errors),
            headers=getattr(exc, "headers", None),
        )

    # FastAPI answers 422 by default; the catalog contract reports field
    # problems as 400 with one message per field.
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        field_errors: Dict[str, str] = {}
        for err in exc.errors():
            field_errors.setdefault(_field_name(err.get("loc", ())), err.get("msg", "Invalid value"))
        return JSONResponse(
            status_code=400,
            content=error_body(VALIDATION_FAILED, "Validation failed for one or more fields", field_errors),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content=error_body(INTERNAL_ERROR, "An unexpected error occurred"),
        )
