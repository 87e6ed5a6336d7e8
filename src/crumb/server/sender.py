"""ASGI response sending — translates a crumb Response to ASGI messages.

This is where the request's cookie jar meets the wire. Cookie lines are
appended only for jars that something actually touched, and only when
the response has no ``Set-Cookie`` header of its own.
"""

import logging

from crumb._internal.asgi import Send
from crumb.http.jar import CookieJar
from crumb.http.response import Response

logger = logging.getLogger("crumb.server")


def _body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # RFC: 1xx, 204, and 304 responses do not include a message body.
    return not (100 <= status < 200 or status in {204, 304})


def cookie_header_values(response: Response, cookies: CookieJar | None) -> list[str]:
    """Return the ``Set-Cookie`` values the jar contributes to *response*.

    A manually assigned ``Set-Cookie`` header wins outright: the jar's
    lines are dropped, not merged.
    """
    if cookies is None:
        return []
    lines = cookies.headers()
    if lines and response.has_header("set-cookie"):
        logger.debug(
            "Response carries a manual Set-Cookie header; discarding %d jar cookie(s): %s",
            len(lines),
            ", ".join(line.partition("=")[0] for line in lines),
        )
        return []
    return lines


async def send_response(response: Response, send: Send, *, cookies: CookieJar | None = None) -> None:
    """Translate a crumb Response into ASGI send() calls.

    *cookies* is sealed once the start message is sent; later changes
    to it raise ``InvalidStateError``.
    """
    raw_headers: list[tuple[bytes, bytes]] = [
        (b"content-type", response.content_type.encode("latin-1")),
    ]
    for name, value in response.headers:
        raw_headers.append((name.lower().encode("latin-1"), value.encode("latin-1")))
    raw_headers.extend(
        (b"set-cookie", line.encode("latin-1"))
        for line in cookie_header_values(response, cookies)
    )

    body = response.body_bytes if _body_allowed(response.status) else b""

    raw_headers.append((b"content-length", str(len(body)).encode("latin-1")))

    try:
        await send(
            {
                "type": "http.response.start",
                "status": response.status,
                "headers": raw_headers,
            }
        )
    finally:
        if cookies is not None:
            cookies.seal()
    await send(
        {
            "type": "http.response.body",
            "body": body,
        }
    )
