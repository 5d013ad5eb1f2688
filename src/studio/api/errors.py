"""Map workflow errors to HTTP responses.

Registered after Protean's own handlers, which already cover
``ValidationError`` (400) and ``ObjectNotFoundError`` (404).
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ExpectedVersionError
from protean.integrations.fastapi import register_exception_handlers

from studio.errors import Conflict, Forbidden, UpstreamFailure, WorkflowError

_STATUS_CODES = (
    (Forbidden, 403),
    (Conflict, 409),
    (UpstreamFailure, 502),
)

VERSION_CONFLICT_HINT = "The record changed while this request was running. Re-fetch it and try again."


def _status_for(exc: WorkflowError) -> int:
    for exc_type, status_code in _STATUS_CODES:
        if isinstance(exc, exc_type):
            return status_code
    return 500


async def workflow_error_handler(_request: Request, exc: WorkflowError) -> JSONResponse:
    return JSONResponse(status_code=_status_for(exc), content=exc.to_dict())


async def version_conflict_handler(_request: Request, exc: ExpectedVersionError) -> JSONResponse:
    return JSONResponse(status_code=409, content={"error": str(exc), "hint": VERSION_CONFLICT_HINT})


def register_studio_exception_handlers(app: FastAPI) -> None:
    register_exception_handlers(app)
    app.add_exception_handler(WorkflowError, workflow_error_handler)
    app.add_exception_handler(ExpectedVersionError, version_conflict_handler)
