from __future__ import annotations

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from clouddedup.core.errors import (
    BackendUnavailable,
    CloudDedupError,
    DeletionPolicyError,
    InvalidArgument,
    NotFound,
)

# the named 422 constant differs between Starlette releases
HTTP_422 = 422

_STATUS_BY_ERROR: tuple[tuple[type[CloudDedupError], int], ...] = (
    (InvalidArgument, HTTP_422),
    (NotFound, status.HTTP_404_NOT_FOUND),
    (DeletionPolicyError, status.HTTP_409_CONFLICT),
    (BackendUnavailable, status.HTTP_503_SERVICE_UNAVAILABLE),
)


def status_for_error(exc: CloudDedupError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def to_http_exception(exc: CloudDedupError) -> HTTPException:
    return HTTPException(status_code=status_for_error(exc), detail=str(exc))


def _error_body(message: str) -> dict[str, object]:
    return {"success": False, "error": message}


async def _http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=_error_body(str(exc.detail)), headers=exc.headers)


async def _validation_exception_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query"))
        messages.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return JSONResponse(
        status_code=HTTP_422,
        content=_error_body("; ".join(messages) or "Invalid request"),
    )


async def _domain_exception_handler(_request: Request, exc: CloudDedupError) -> JSONResponse:
    return JSONResponse(status_code=status_for_error(exc), content=_error_body(str(exc)))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(CloudDedupError, _domain_exception_handler)  # type: ignore[arg-type]
