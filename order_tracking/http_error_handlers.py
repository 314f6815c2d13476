# order_tracking/http_error_handlers.py
from __future__ import annotations

import logging
import uuid

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from order_tracking.api.upload_guard import UploadRejected
from order_tracking.core import messages

logger = logging.getLogger(__name__)

# framework-raised statuses whose English detail is replaced
_HTTP_MESSAGES = {
    404: messages.NOT_FOUND,
    405: messages.METHOD_NOT_ALLOWED,
}


def _new_trace_id() -> str:
    return f"t_{uuid.uuid4().hex[:12]}"


def error_response(status_code: int, message: str) -> JSONResponse:
    # same shape the order routes use: {success: false, error}
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def unhandled_error_response(req: Request, exc: Exception) -> JSONResponse:
    """Log `exc` with a trace id and answer with the generic 500."""
    trace_id = _new_trace_id()
    logger.exception(
        "UNHANDLED_EXC[%s] %s %s: %s", trace_id, req.method, req.url.path, exc, exc_info=exc
    )
    return error_response(500, messages.INTERNAL_ERROR)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Everything that escapes a route is rendered as `{success: false, error}`.
    Details (validation errors, stack traces) go to the log only, tagged with a
    trace id.
    """

    @app.exception_handler(Exception)
    async def _unhandled_exc(req: Request, exc: Exception):
        return unhandled_error_response(req, exc)

    @app.exception_handler(UploadRejected)
    async def _upload_rejected(req: Request, exc: UploadRejected):
        return error_response(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def _validation_exc(req: Request, exc: RequestValidationError):
        logger.info(
            "VALIDATION[%s] %s %s: %s", _new_trace_id(), req.method, req.url.path, exc.errors()
        )
        return error_response(422, messages.INVALID_REQUEST)

    @app.exception_handler(StarletteHTTPException)
    async def _http_exc(req: Request, exc: StarletteHTTPException):
        status_code = int(exc.status_code)
        detail = exc.detail if isinstance(exc.detail, str) else messages.INVALID_REQUEST
        return error_response(status_code, _HTTP_MESSAGES.get(status_code, detail))
