"""Middleware protocol and Next type alias.

A middleware is any callable matching::

    async def my_mw(request: Request, next: Next) -> Response: ...

No base class required. The framework checks the shape, not the lineage.
"""

from collections.abc import Awaitable, Callable
from typing import Protocol, TypeAlias

from crumb.http.request import Request
from crumb.http.response import Response

# Any response type the pipeline can produce
AnyResponse: TypeAlias = Response

# The next handler in the middleware chain
Next: TypeAlias = Callable[[Request], Awaitable[AnyResponse]]


class Middleware(Protocol):
    """Protocol for crumb middleware.

    Accepts both functions and callable objects::

        # Function middleware
        async def last_visit(request: Request, next: Next) -> Response:
            response = await next(request)
            request.cookies.set("last_visit", request.path, expires="30 days")
            return response

        # Class middleware
        class ConsentGate:
            async def __call__(self, request: Request, next: Next) -> Response:
                ...
    """

    async def __call__(self, request: Request, next: Next) -> AnyResponse: ...
