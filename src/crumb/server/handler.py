"""ASGI handler — translates ASGI scope/messages to crumb types.

The only component that touches raw ASGI directly. Converts scope dicts
to typed Request objects, dispatches through middleware and the
endpoint, and sends the Response (plus any cookie changes) back through
ASGI send().
"""

import json as json_module
import logging
from collections.abc import Callable
from contextvars import Token
from typing import Any

from crumb._internal.asgi import Receive, Scope, Send
from crumb._internal.invoke import invoke
from crumb.context import request_var
from crumb.errors import HTTPError
from crumb.http.cookies import CookieOptions
from crumb.http.request import Request
from crumb.http.response import Redirect, Response
from crumb.middleware.protocol import AnyResponse, Next
from crumb.server.sender import send_response

logger = logging.getLogger("crumb.server")


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    endpoint: Callable[..., Any],
    middleware: tuple[Callable[..., Any], ...] = (),
    cookie_defaults: CookieOptions | None = None,
    debug: bool = False,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive, cookie_defaults=cookie_defaults)

    # Set request context var (reset after dispatch)
    token: Token[Request] = request_var.set(request)
    keep_cookies = True

    try:

        async def dispatch(req: Request) -> AnyResponse:
            return to_response(await invoke(endpoint, req))

        # Wrap middleware around the dispatch
        handler = dispatch
        for mw in reversed(middleware):
            outer = handler

            async def make_next(req: Request, _mw: Any = mw, _next: Next = outer) -> Response:
                return to_response(await invoke(_mw, req, _next))

            handler = make_next

        response = await handler(request)

    except HTTPError as exc:
        response = http_error_response(exc)
    except Exception as exc:
        logger.exception("Unhandled error in %s %s", request.method, request.path)
        response = internal_error_response(exc, debug=debug)
        keep_cookies = False
    finally:
        request_var.reset(token)

    jar = request.peek_cookies()
    if jar is not None and not keep_cookies:
        # A half-finished request must not change client state.
        jar.seal()
        jar = None
    await send_response(response, send, cookies=jar)


def to_response(result: Any) -> Response:
    """Convert an endpoint's return value to a Response."""
    if isinstance(result, Response):
        return result
    if isinstance(result, Redirect):
        return result.to_response()
    if isinstance(result, str | bytes):
        return Response(body=result)
    if isinstance(result, dict | list):
        return Response(
            body=json_module.dumps(result),
            content_type="application/json",
        )
    msg = f"Cannot convert {type(result).__name__} to a Response"
    raise TypeError(msg)


def http_error_response(exc: HTTPError) -> Response:
    """Plain-text response for an HTTPError. Cookies set so far still apply."""
    response = Response(
        body=exc.detail or str(exc.status),
        status=exc.status,
        content_type="text/plain; charset=utf-8",
    )
    for name, value in exc.headers:
        response = response.with_header(name, value)
    return response


def internal_error_response(exc: Exception, *, debug: bool) -> Response:
    """500 response. Shows the exception text only in debug mode."""
    body = "Internal Server Error"
    if debug:
        body = f"{body}\n\n{type(exc).__name__}: {exc}"
    return Response(body=body, status=500, content_type="text/plain; charset=utf-8")
