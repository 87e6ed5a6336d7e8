"""Middleware — Protocol-based, no inheritance required.

A middleware is any callable matching:
    async def mw(request: Request, next: Next) -> Response

Middleware that reads or writes ``request.cookies`` shares the same jar
as the endpoint; the sender emits the combined changes once.
"""

from crumb.middleware.protocol import AnyResponse, Middleware, Next

__all__ = [
    "AnyResponse",
    "Middleware",
    "Next",
]
