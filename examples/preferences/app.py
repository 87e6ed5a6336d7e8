"""Preferences — remember UI settings in a cookie.

Demonstrates reading a JSON cookie, writing it back with an expiry,
deleting it, a flash message that lives for one request, and the
manual Set-Cookie override.

Serve with any ASGI server, e.g.:
    uvicorn app:app
"""

from crumb import App, AppConfig, CookieOptions, Next, Redirect, Request, Response

DEFAULT_PREFS = {"darkMode": False, "fontSize": 14}


def load_prefs(request: Request) -> dict:
    cookie = request.cookies.get("prefs")
    if cookie is None:
        return dict(DEFAULT_PREFS)
    return {**DEFAULT_PREFS, **cookie.json()}


async def flash_messages(request: Request, next: Next) -> Response:
    """Show a flash message once, then clear it."""
    flash = request.cookies.get("flash")
    if flash is not None:
        request.cookies.delete("flash")
    response = await next(request)
    if flash is not None:
        return response.with_header("X-Flash", flash.value)
    return response


def endpoint(request: Request) -> Response | Redirect | dict:
    if request.path == "/":
        return load_prefs(request)

    if request.path == "/toggle-dark":
        prefs = load_prefs(request)
        prefs["darkMode"] = not prefs["darkMode"]
        request.cookies.set("prefs", prefs, expires="1 year")
        request.cookies.set("flash", "Theme updated")
        return Redirect("/")

    if request.path == "/reset":
        request.cookies.delete("prefs")
        return Redirect("/")

    if request.path == "/legacy":
        # Hand-written header: the jar's changes are not sent.
        request.cookies.set("prefs", DEFAULT_PREFS)
        return Response("legacy").with_header("Set-Cookie", "legacy=1; Path=/")

    return Response("Not Found").with_status(404)


app = App(
    endpoint,
    AppConfig(cookie_defaults=CookieOptions(path="/", httponly=True, samesite="lax")),
)
app.add_middleware(flash_messages)
