"""Cross-cutting HTTP behaviour.

- EnvelopeRoute: wraps every successful JSON payload as {"data": ...}
- TimeoutMiddleware: answers 408 when a request takes too long
- register_exception_handlers: uniform {statusCode, message, error, ...} errors
"""

import asyncio
import json
import logging
from http import HTTPStatus
from typing import Callable

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response, StreamingResponse
from fastapi.routing import APIRoute
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from .exceptions import NotFoundError
from .schemas import error_body

logger = logging.getLogger("coffee_api.http")


def _phrase(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Error"


class EnvelopeRoute(APIRoute):
    """Route class that nests successful JSON bodies under `data`."""

    def get_route_handler(self) -> Callable:
        original_handler = super().get_route_handler()

        async def envelope_handler(request: Request) -> Response:
            response = await original_handler(request)
            if (
                isinstance(response, StreamingResponse)
                or response.status_code >= 400
                or not response.headers.get("content-type", "").startswith("application/json")
            ):
                return response

            payload = json.loads(response.body) if response.body else None
            headers = {
                k: v for k, v in response.headers.items()
                if k not in ("content-length", "content-type")
            }
            return JSONResponse(
                {"data": payload},
                status_code=response.status_code,
                headers=headers,
                background=response.background,
            )

        return envelope_handler


class TimeoutMiddleware:
    """Short-circuit requests that have not responded within `timeout_seconds`.

    The handler keeps running (a sync handler cannot be interrupted mid-query);
    anything it sends after the deadline is dropped.
    """

    def __init__(self, app: ASGIApp, timeout_seconds: float) -> None:
        self.app = app
        self.timeout_seconds = timeout_seconds

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False
        timed_out = False

        async def guarded_send(message: Message) -> None:
            nonlocal response_started
            if timed_out:
                return
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        def log_late_failure(task: asyncio.Task) -> None:
            # Only abandoned handlers; otherwise the error propagates below
            if not timed_out or task.cancelled():
                return
            exc = task.exception()
            if exc is not None:
                logger.error(f"Handler for {scope.get('path', '')} failed after timeout", exc_info=exc)

        task = asyncio.ensure_future(self.app(scope, receive, guarded_send))
        task.add_done_callback(log_late_failure)
        done, _ = await asyncio.wait({task}, timeout=self.timeout_seconds)
        if done:
            task.result()
            return

        if response_started:
            # Body is already streaming; let it finish.
            await task
            return

        timed_out = True
        task.cancel()
        path = scope.get("path", "")
        logger.warning(f"{scope.get('method')} {path} timed out after {self.timeout_seconds}s")
        response = JSONResponse(
            error_body(408, "Request timed out", _phrase(408), path),
            status_code=408,
        )
        await response(scope, receive, send)


def _validation_messages(exc: RequestValidationError) -> list[str]:
    messages = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ())[1:]]
        field = ".".join(loc)
        if err.get("type") == "extra_forbidden":
            messages.append(f"property {field} should not exist")
        elif field:
            messages.append(f"{field}: {err.get('msg')}")
        else:
            messages.append(err.get("msg", "Invalid request"))
    return messages


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        error_body(400, _validation_messages(exc), _phrase(400), request.url.path),
        status_code=400,
    )


async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(
        error_body(404, str(exc), _phrase(404), request.url.path),
        status_code=404,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        error_body(exc.status_code, exc.detail, _phrase(exc.status_code), request.url.path),
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        error_body(500, "Internal server error", _phrase(500), request.url.path),
        status_code=500,
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
