"""Crumb — request-scoped cookies for ASGI applications.

Reads the ``Cookie`` header lazily, lets handlers get, set and delete
cookies with typed accessors, and writes only what changed back as
``Set-Cookie`` headers.

Basic usage::

    from crumb import App, Request

    def index(request: Request) -> str:
        prefs = request.cookies.get("prefs")
        dark = prefs.json()["darkMode"] if prefs else False
        request.cookies.set("prefs", {"darkMode": not dark}, expires="30 days")
        return "toggled"

    app = App(index)
"""

__version__ = "0.1.0-dev"
__all__ = [
    "AnyResponse",
    "App",
    "AppConfig",
    "ConfigurationError",
    "CookieAccessor",
    "CookieJar",
    "CookieOptions",
    "CrumbError",
    "Duration",
    "DurationUnit",
    "HTTPError",
    "InvalidStateError",
    "Middleware",
    "Next",
    "NotFound",
    "ParseError",
    "Redirect",
    "Request",
    "Response",
    "get_cookies",
    "get_request",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import crumb`` fast while providing a clean top-level API.
    """
    if name == "App":
        from crumb.app import App

        return App

    if name == "AppConfig":
        from crumb.config import AppConfig

        return AppConfig

    if name == "Request":
        from crumb.http.request import Request

        return Request

    if name in ("Response", "Redirect"):
        from crumb.http import response as _resp

        return getattr(_resp, name)

    if name in ("CookieJar", "CookieAccessor"):
        from crumb.http import jar as _jar

        return getattr(_jar, name)

    if name == "CookieOptions":
        from crumb.http.cookies import CookieOptions

        return CookieOptions

    if name in ("Duration", "DurationUnit"):
        from crumb.http import durations as _durations

        return getattr(_durations, name)

    if name in ("AnyResponse", "Middleware", "Next"):
        from crumb.middleware import protocol as _mw

        return getattr(_mw, name)

    if name in ("get_cookies", "get_request"):
        from crumb import context as _ctx

        return getattr(_ctx, name)

    if name in (
        "ConfigurationError",
        "CrumbError",
        "HTTPError",
        "InvalidStateError",
        "NotFound",
        "ParseError",
    ):
        from crumb import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
