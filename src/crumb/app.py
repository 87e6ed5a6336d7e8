"""The crumb application: an ASGI callable around one endpoint.

Routing and rendering are someone else's job. ``App`` owns the pieces
the cookie jar needs from a framework: a per-request context, a
middleware chain, and a finalization step that writes cookie changes
onto the response.
"""

import logging
import threading
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from crumb._internal.asgi import Receive, Scope, Send
from crumb.config import AppConfig
from crumb.errors import ConfigurationError, ParseError
from crumb.http.durations import resolve_expires
from crumb.middleware.protocol import Middleware
from crumb.server.handler import handle_request

logger = logging.getLogger("crumb.server")


class App:
    """An ASGI application serving a single endpoint.

    Mutable during setup (middleware registration). Frozen at runtime
    when ``__call__()`` is first invoked::

        from crumb import App, Request

        def index(request: Request) -> str:
            visits = request.cookies.get("visits")
            count = int(visits.number()) + 1 if visits else 1
            request.cookies.set("visits", str(count), expires="1 year")
            return f"Visit #{count}"

        app = App(index)

    The endpoint receives the ``Request`` and may be sync or async.

    Thread safety:
        Setup is single-threaded. The freeze transition uses a Lock +
        double-check so exactly one thread compiles the middleware chain.
    """

    __slots__ = (
        "_endpoint",
        "_freeze_lock",
        "_frozen",
        "_middleware",
        "_middleware_list",
        "config",
    )

    def __init__(self, endpoint: Callable[..., Any], config: AppConfig | None = None) -> None:
        self.config: AppConfig = config or AppConfig()
        self._endpoint = endpoint
        self._middleware_list: list[Middleware] = []
        self._middleware: tuple[Callable[..., Any], ...] = ()
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()
        self._check_config()
        if self.config.log_level is not None:
            logging.getLogger("crumb").setLevel(self.config.log_level.upper())

    def add_middleware(self, middleware: Middleware) -> None:
        """Append a middleware; the first added runs outermost."""
        if self._frozen:
            msg = "Cannot add middleware after the app has started serving requests."
            raise ConfigurationError(msg)
        self._middleware_list.append(middleware)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        self._ensure_frozen()

        await handle_request(
            scope,
            receive,
            send,
            endpoint=self._endpoint,
            middleware=self._middleware,
            cookie_defaults=self.config.cookie_defaults,
            debug=self.config.debug,
        )

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                self._ensure_frozen()
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _check_config(self) -> None:
        """Fail at startup if the default cookie options cannot be used."""
        expires = self.config.cookie_defaults.expires
        if expires is None:
            return
        try:
            resolve_expires(expires, datetime.now(UTC))
        except ParseError as exc:
            msg = f"AppConfig.cookie_defaults.expires is invalid: {exc}"
            raise ConfigurationError(msg) from exc

    def _ensure_frozen(self) -> None:
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._middleware = tuple(self._middleware_list)
            self._frozen = True
            logger.debug("App frozen with %d middleware", len(self._middleware))
