"""Per-request scope: the studio domain context plus request-bound log fields."""

from uuid import uuid4

from fastapi import FastAPI, Request

from studio.utils.logging import add_context, clear_context, get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
UNSCOPED_PATHS = frozenset({"/health"})


def install_request_context(app: FastAPI, domain) -> None:
    """Run every request inside ``domain``'s context with its id bound to the logs.

    The caller's ``X-Request-ID`` is reused when present and echoed back on
    the response either way.
    """

    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next):
        if request.url.path in UNSCOPED_PATHS:
            return await call_next(request)

        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
        clear_context()
        add_context(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            user_id=request.headers.get("X-User-Id"),
        )
        try:
            with domain.domain_context():
                response = await call_next(request)
            logger.debug("request_handled", status_code=response.status_code)
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            clear_context()
