"""Crumb exception hierarchy.

Shared across the cookie jar, the request pipeline, and middleware so
every module raises and catches the same types.
"""

from dataclasses import dataclass


class CrumbError(Exception):
    """Base for all crumb-specific errors."""


class ConfigurationError(CrumbError):
    """Raised when app configuration is invalid.

    Typically raised while constructing ``App`` at startup.
    """


class ParseError(CrumbError, ValueError):
    """Raised when cookie text, an option, or a duration cannot be parsed.

    Surfaces at the call that supplied the bad input (``set()``,
    ``CookieAccessor.json()``), never later during serialization.
    """


class InvalidStateError(CrumbError, RuntimeError):
    """Raised when a cookie jar is mutated after its headers were sent."""


@dataclass(frozen=True, slots=True)
class HTTPError(CrumbError):
    """An error that maps directly to an HTTP status code.

    Raised by endpoints or middleware. The ASGI handler catches these
    and turns them into a plain-text response.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """404 — the endpoint has nothing at this path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)
