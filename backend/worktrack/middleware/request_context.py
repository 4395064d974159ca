"""
Request context middleware.

Propagates (or creates) the X-Request-ID header and keeps a per-request state
dict (request id, calling actor) in a ContextVar, so log lines written
anywhere during the request can be tied back to it and to who made it.

The endpoint runs in a child task with a copied context, so the actor is
written into the shared dict rather than by rebinding the ContextVar; the
middleware's own access log line then sees it.
"""

import logging
import time
from contextvars import ContextVar
from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger(__name__)

ANONYMOUS = "anonymous"

_request_state_var: ContextVar[dict | None] = ContextVar("request_state", default=None)


def get_request_id() -> str:
    state = _request_state_var.get()
    return state["request_id"] if state else ""


def get_actor() -> str:
    state = _request_state_var.get()
    return state["actor"] if state else ANONYMOUS


def set_actor(actor: str) -> None:
    """Called once the principal has been resolved for the request."""
    state = _request_state_var.get()
    if state is not None:
        state["actor"] = actor


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or uuid4().hex
        token = _request_state_var.set({"request_id": request_id, "actor": ANONYMOUS})

        start_time = time.time()
        try:
            response = await call_next(request)
            duration_ms = round((time.time() - start_time) * 1000, 2)
            response.headers["X-Request-ID"] = request_id
            logger.info(
                "%s %s %s %.0fms",
                request.method,
                request.url.path,
                response.status_code,
                duration_ms,
                extra={"duration_ms": duration_ms},
            )
            return response
        finally:
            _request_state_var.reset(token)
