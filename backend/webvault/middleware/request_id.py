"""
WebVault Backend — Request ID Middleware
==========================================

What:  Gives every request an id and echoes it in the X-Request-ID header.
How:   A client-supplied X-Request-ID is reused; otherwise a UUID4 is
       generated. The id is stored in a ContextVar (read by loggers, error
       handlers and the envelope builders) and in request.state.
When:  Outermost middleware, so every later layer sees the id.

Unhandled exceptions that escape the app are turned into the internal_error
envelope here, while the id is still known, so 500 responses carry the
X-Request-ID header like every other response.
"""

import logging
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# Coroutine-local: concurrent requests on one event loop each see their own id
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())

        token = request_id_var.set(rid)
        request.state.request_id = rid
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
            response = _internal_error(request, rid)
        finally:
            request_id_var.reset(token)

        response.headers[REQUEST_ID_HEADER] = rid
        return response


def _internal_error(request: Request, rid: str) -> JSONResponse:
    # envelope imports request_id_var from this module
    from webvault.schemas.envelope import error, format_timestamp

    style = getattr(request.state, "timestamp_style", "iso")
    body = error(request_id=rid, timestamp=format_timestamp(style))
    return JSONResponse(status_code=500, content=body.model_dump(by_alias=True, mode="json"))
