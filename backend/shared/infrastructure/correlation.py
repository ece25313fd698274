"""
Request correlation.

Every HTTP request gets an id (the caller's X-Request-ID, or a new UUID).
The id is held in a context variable for the lifetime of the request so
that CorrelationIdFilter can stamp it on every log record, and it is echoed
back on the response.
"""

import time
import uuid
from contextvars import ContextVar

from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from shared.config.logging import get_logger

REQUEST_ID_HEADER = "X-Request-ID"

request_id_var: ContextVar[str] = ContextVar("request_id", default="")

logger = get_logger(__name__)


def get_request_id() -> str:
    return request_id_var.get()


class CorrelationIdMiddleware:
    """ASGI middleware: assign the request id and log each completed request."""

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = Headers(scope=scope).get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        token = request_id_var.set(request_id)
        started = time.perf_counter()
        status_code = 500

        async def send_with_id(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
                MutableHeaders(scope=message)[REQUEST_ID_HEADER] = request_id
            await send(message)

        try:
            await self.app(scope, receive, send_with_id)
        finally:
            logger.debug(
                "Request completed",
                method=scope["method"],
                path=scope["path"],
                status=status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            request_id_var.reset(token)


class CorrelationIdFilter:
    """Logging filter that adds ``request_id`` ("-" outside a request)."""

    def filter(self, record) -> bool:
        record.request_id = request_id_var.get() or "-"
        return True
