"""
ContactBook Backend: Request Timeout Middleware
================================================

What:  Bounds the time a single request may take.
How:   Plain ASGI middleware. The downstream app runs inside
       asyncio.wait_for, so on timeout the handler itself is cancelled: an
       open session is closed without commit and nothing half-done is
       persisted. If the response has not started yet the client receives
       504 with the standard error body.
When:  Every HTTP request. The deadline comes from REQUEST_TIMEOUT unless
       the middleware is constructed with an explicit `timeout`.

Written as an ASGI callable (like Starlette's own GZip and CORS
middleware) because BaseHTTPMiddleware runs the endpoint in a separate
task that a timeout around call_next cannot cancel.
"""

import asyncio
import logging
from typing import Optional

from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from contactbook.config import settings
from contactbook.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)


class RequestTimeoutMiddleware:

    def __init__(self, app: ASGIApp, timeout: Optional[float] = None):
        self.app = app
        self.timeout = timeout if timeout is not None else settings.request_timeout

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await asyncio.wait_for(self.app(scope, receive, send_wrapper), timeout=self.timeout)
        except asyncio.TimeoutError:
            rid = request_id_var.get("")
            logger.error(
                "[%s] %s %s exceeded %.1fs timeout",
                rid,
                scope["method"],
                scope["path"],
                self.timeout,
            )
            if response_started:
                # Headers are already out; the truncated body is all we can do
                return
            response = JSONResponse(
                status_code=504,
                content={
                    "error": "request_timeout",
                    "message": f"The request did not complete within {self.timeout:g} seconds.",
                    "details": {"timeout_seconds": self.timeout},
                    "request_id": rid,
                },
            )
            await response(scope, receive, send)
