"""Request-scoped context via ContextVar.

Provides:
- ``request_var``: The current ``Request`` for this task/thread.
- ``get_request()``: The current request.
- ``get_cookies()``: The current request's cookie jar.

``request_var`` is set by the handler pipeline and reset after each
request. Accessing it outside a request raises ``LookupError``.

Thread safety:
    ``ContextVar`` is task-local under asyncio and thread-local under
    free-threading. Each request sees only its own jar. No locks needed.
"""

from contextvars import ContextVar

from crumb.http.jar import CookieJar
from crumb.http.request import Request

request_var: ContextVar[Request] = ContextVar("crumb_request")
"""The current request. Set by the ASGI handler before dispatch."""


def get_request() -> Request:
    """Return the current request.

    Raises ``LookupError`` if called outside a request context.
    """
    return request_var.get()


def get_cookies() -> CookieJar:
    """Return the current request's cookie jar, creating it on first use.

    Usage::

        from crumb.context import get_cookies

        def remember_theme(theme: str) -> None:
            get_cookies().set("theme", theme, expires="1 year")

    Raises ``LookupError`` if called outside a request context.
    """
    return request_var.get().cookies
