"""Immutable HTTP request.

Frozen metadata with async body access and a lazily created cookie jar.
The request is honest about what it is: received data that doesn't
change. The jar is the one mutable thing it owns, and it lives in the
request's private cache, never in a module global.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from dataclasses import dataclass, field
from typing import Any

from crumb._internal.asgi import Receive
from crumb.http.cookies import CookieOptions
from crumb.http.headers import Headers
from crumb.http.jar import CookieJar


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    Metadata (method, path, headers, etc.) is frozen at creation.
    Body is accessed asynchronously via ``.body()``, ``.json()``, ``.text()``.

    ``cookies`` is built on first access and then reused for the rest of
    the request, so middleware and the endpoint share one jar.
    """

    method: str
    path: str
    headers: Headers
    query_string: bytes
    http_version: str
    server: tuple[str, int] | None
    client: tuple[str, int] | None

    # Private: ASGI receive callable for body streaming
    _receive: Receive

    # Private: base option set for cookies written through this request
    _cookie_defaults: CookieOptions | None = field(default=None, repr=False, compare=False)

    # Private: mutable cache for body and the cookie jar
    # (dict contents are mutable even though the field reference is frozen)
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    # -- Cookies --

    @property
    def cookies(self) -> CookieJar:
        """The request's cookie jar, created on first access."""
        jar = self._cache.get("_cookies")
        if jar is None:
            jar = CookieJar(self.headers.cookie_header(), defaults=self._cookie_defaults)
            self._cache["_cookies"] = jar
        return jar

    def peek_cookies(self) -> CookieJar | None:
        """Return the jar if anything has touched ``cookies``, else ``None``.

        Lets the response sender skip cookie work for requests that never
        asked for it, without creating a jar as a side effect.
        """
        return self._cache.get("_cookies")

    # -- Computed properties --

    @property
    def content_type(self) -> str | None:
        """The Content-Type header value."""
        return self.headers.get("content-type")

    @property
    def url(self) -> str:
        """Full request URL (path + query string)."""
        if self.query_string:
            return f"{self.path}?{self.query_string.decode('latin-1')}"
        return self.path

    # -- Async body access --

    async def body(self) -> bytes:
        """Read the full request body.

        Result is cached — the ASGI receive is consumed once, then
        the same bytes are returned on subsequent calls.
        """
        if "_body" in self._cache:
            return self._cache["_body"]
        chunks = [chunk async for chunk in self.stream()]
        result = b"".join(chunks)
        self._cache["_body"] = result
        return result

    async def stream(self) -> AsyncGenerator[bytes]:
        """Stream the request body in chunks."""
        while True:
            message = await self._receive()
            body = message.get("body", b"")
            if body:
                yield body
            if not message.get("more_body", False):
                break

    async def json(self) -> Any:
        """Parse the body as JSON."""
        import json as json_module

        raw = await self.body()
        return json_module.loads(raw)

    async def text(self) -> str:
        """Read the body as text (UTF-8)."""
        raw = await self.body()
        return raw.decode("utf-8")

    # -- Factory --

    @classmethod
    def from_asgi(
        cls,
        scope: dict[str, Any],
        receive: Receive,
        *,
        cookie_defaults: CookieOptions | None = None,
    ) -> Request:
        """Create a Request from an ASGI scope and receive callable."""
        server = scope.get("server")
        client = scope.get("client")
        return cls(
            method=scope["method"],
            path=scope["path"],
            headers=Headers(tuple(scope.get("headers", ()))),
            query_string=scope.get("query_string", b""),
            http_version=scope.get("http_version", "1.1"),
            server=tuple(server) if server else None,
            client=tuple(client) if client else None,
            _receive=receive,
            _cookie_defaults=cookie_defaults,
        )
