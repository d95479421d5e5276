"""
Translate access-layer failures into HTTP responses.

Every kind of failure maps to one status code, whichever entity kind raised it.
"""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from taskgrid.access.errors import (
    AccessError,
    ForbiddenError,
    MembershipConflictError,
    NotFoundError,
    RuleViolationError,
    SetupConflictError,
    TransientStoreError,
)

log = structlog.get_logger()

STATUS_BY_ERROR: list[tuple[type[AccessError], int]] = [
    (NotFoundError, 404),
    (ForbiddenError, 403),
    (MembershipConflictError, 409),
    (RuleViolationError, 400),
    (SetupConflictError, 409),
    (TransientStoreError, 503),
]


def status_for(exc: AccessError) -> int:
    for error_type, status in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status
    return 500


def error_body(code: str, message: str, status: int) -> dict:
    return {"error": {"code": code, "message": message, "status": status}}


async def access_error_handler(request: Request, exc: AccessError) -> JSONResponse:
    status = status_for(exc)
    if status >= 500:
        log.error("request.access_error", path=request.url.path, code=exc.code, error=str(exc))
    return JSONResponse(status_code=status, content=error_body(exc.code, str(exc), status))


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AccessError, access_error_handler)
