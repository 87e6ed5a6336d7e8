"""Invoke helpers — call sync or async endpoints uniformly.

Endpoints and middleware can be ``def`` or ``async def``. Any code that
calls user-provided callables must handle both cases, so the check
lives here in one place::

    from crumb._internal.invoke import invoke

    result = await invoke(endpoint, request)
"""

import inspect
from typing import Any


async def invoke(handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *handler* and await the result if it's awaitable."""
    result = handler(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
