"""Request-scoped cookie jar.

The jar is the single place handlers read and change cookies. It loads
the request's ``Cookie`` header on first use, records every ``set()``
and ``delete()`` as a dirty entry, and renders only those entries as
``Set-Cookie`` lines when the response is sent::

    jar = request.cookies
    if not jar.has("visited"):
        jar.set("visited", "1", expires="1 year", httponly=True)
    prefs = jar.get("prefs")
    theme = prefs.json()["theme"] if prefs else "light"

Thread safety:
    A jar belongs to exactly one request and is only touched by the task
    handling that request. It carries no lock.
"""

from __future__ import annotations

import json
import math
import re
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from crumb.errors import InvalidStateError, ParseError
from crumb.http.cookies import (
    CookieOptions,
    parse_cookie_header,
    serialize_cookie,
)
from crumb.http.durations import EPOCH, resolve_expires

# Decimal literal with optional exponent; no digit separators
_DECIMAL_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")
_PREFIXED_INT_RE = re.compile(r"^0(?:[xX][0-9a-fA-F]+|[oO][0-7]+|[bB][01]+)$")
_INFINITIES = {"Infinity": math.inf, "+Infinity": math.inf, "-Infinity": -math.inf}


def _utcnow() -> datetime:
    return datetime.now(UTC)


class EntryState(Enum):
    """Whether an entry needs a ``Set-Cookie`` line."""

    UNCHANGED = "unchanged"
    SET = "set"
    DELETED = "deleted"


@dataclass(slots=True)
class CookieEntry:
    """One named cookie and what this request has done to it."""

    name: str
    value: str
    options: CookieOptions | None = None
    expires: datetime | None = None
    state: EntryState = EntryState.UNCHANGED

    @property
    def dirty(self) -> bool:
        return self.state is not EntryState.UNCHANGED


@dataclass(frozen=True, slots=True)
class CookieAccessor:
    """Read view over one cookie value with typed decoders.

    Attribute fields reflect the most recent ``set()`` in this request.
    Cookies that only arrived in the request header have no attributes,
    so every attribute reads as ``None``.
    """

    value: str
    options: CookieOptions | None = None
    _expires: datetime | None = None

    def json(self) -> Any:
        """Parse the value as JSON.

        Raises:
            ParseError: If the value is not valid JSON.
        """
        try:
            return json.loads(self.value)
        except json.JSONDecodeError as exc:
            msg = f"Cookie value is not valid JSON: {exc}"
            raise ParseError(msg) from exc

    def number(self) -> float:
        """Parse the value as a number, or ``math.nan`` if it is not numeric.

        Accepts decimal and exponent notation, ``0x``/``0o``/``0b``
        integers, and ``Infinity``. Digit separators (``1_000``), other
        spellings of infinity, and blank text are not numeric.
        """
        text = self.value.strip()
        if _DECIMAL_RE.match(text):
            return float(text)
        if _PREFIXED_INT_RE.match(text):
            try:
                return float(int(text, 0))
            except OverflowError:
                return math.inf
        return _INFINITIES.get(text, math.nan)

    def boolean(self) -> bool:
        """True for ``"true"`` or ``"1"`` (case-insensitive)."""
        return self.value.strip().lower() in ("true", "1")

    # -- Attribute passthrough --

    @property
    def domain(self) -> str | None:
        return self.options.domain if self.options else None

    @property
    def path(self) -> str | None:
        return self.options.path if self.options else None

    @property
    def expires(self) -> datetime | None:
        """The resolved expiry, as an aware UTC datetime."""
        return self._expires

    @property
    def max_age(self) -> int | None:
        return self.options.max_age if self.options else None

    @property
    def httponly(self) -> bool | None:
        return self.options.httponly if self.options else None

    @property
    def secure(self) -> bool | None:
        return self.options.secure if self.options else None

    @property
    def samesite(self) -> str | bool | None:
        return self.options.samesite if self.options else None

    def __str__(self) -> str:
        return self.value


class CookieJar:
    """Mutable, request-scoped cookie store.

    Loads the request's ``Cookie`` header lazily, on the first call to
    any operation. Names are case-sensitive and unique: a later
    ``set()`` or ``delete()`` rewrites the existing entry in place, so
    ``headers()`` order follows the order names were first seen.

    ``defaults`` is the base option set every ``set()``/``delete()``
    extends. ``clock`` supplies the reference time for relative
    ``expires`` durations.
    """

    __slots__ = ("_clock", "_defaults", "_entries", "_parsed", "_sealed", "_source")

    def __init__(
        self,
        header: str = "",
        *,
        defaults: CookieOptions | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._source = header
        self._defaults = defaults or CookieOptions()
        self._clock = clock
        self._entries: dict[str, CookieEntry] = {}
        self._parsed = False
        self._sealed = False

    # -- Reading --

    def get(
        self, name: str, *, decode: Callable[[str], str] | None = None
    ) -> CookieAccessor | None:
        """Return an accessor for *name*, or ``None`` if absent or deleted.

        *decode*, if given, transforms the stored text before it is
        wrapped (e.g. to undo an application-level encoding).
        """
        entry = self._live_entry(name)
        if entry is None:
            return None
        value = decode(entry.value) if decode is not None else entry.value
        return CookieAccessor(value=value, options=entry.options, _expires=entry.expires)

    def has(self, name: str) -> bool:
        """True if *name* exists and was not deleted in this request."""
        return self._live_entry(name) is not None

    # -- Writing --

    def set(
        self,
        name: str,
        value: Any,
        options: CookieOptions | Mapping[str, Any] | None = None,
        **overrides: Any,
    ) -> None:
        """Set a cookie for the response.

        Non-string values are stored as compact JSON text. Options are
        layered: jar defaults, then *options*, then keyword *overrides*.
        Unknown option names are ignored.

        Raises:
            ParseError: If the name, an attribute, or ``expires`` is invalid.
            InvalidStateError: If the response headers were already sent.
        """
        self._ensure_mutable(f"set cookie {name!r}")
        text = value if isinstance(value, str) else json.dumps(value, separators=(",", ":"))
        resolved = self._resolve_options(options, overrides)
        expires = (
            resolve_expires(resolved.expires, self._clock())
            if resolved.expires is not None
            else None
        )
        entry = CookieEntry(
            name=name, value=text, options=resolved, expires=expires, state=EntryState.SET
        )
        self._validate(entry)
        self._store(entry)

    def delete(
        self,
        name: str,
        options: CookieOptions | Mapping[str, Any] | None = None,
        **overrides: Any,
    ) -> None:
        """Delete a cookie: the response tells the client to expire it.

        ``domain`` and ``path`` should match the ones the cookie was set
        with. Any ``expires``/``max_age`` is replaced by the epoch.

        Raises:
            InvalidStateError: If the response headers were already sent.
        """
        self._ensure_mutable(f"delete cookie {name!r}")
        resolved = replace(self._resolve_options(options, overrides), expires=None, max_age=None)
        entry = CookieEntry(
            name=name, value="", options=resolved, expires=EPOCH, state=EntryState.DELETED
        )
        self._validate(entry)
        self._store(entry)

    def merge(self, other: CookieJar) -> None:
        """Copy every pending change in *other* into this jar.

        Changes recorded in *other* win over this jar's entries of the
        same name.
        """
        self._ensure_mutable("merge cookies")
        self._ensure_parsed()
        for entry in other._entries.values():
            if entry.dirty:
                self._store(replace(entry))

    # -- Output --

    def headers(self) -> list[str]:
        """Render one ``Set-Cookie`` value per set or deleted cookie.

        Derived from current state on every call, so repeated calls
        return the same lines.
        """
        self._ensure_parsed()
        return [self._render(entry) for entry in self._entries.values() if entry.dirty]

    @property
    def sealed(self) -> bool:
        """True once the response carrying this jar's headers was sent."""
        return self._sealed

    def seal(self) -> None:
        """Reject further changes. Called by the sender after flushing headers."""
        self._sealed = True

    # -- Container protocol --

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has(name)

    def __iter__(self) -> Iterator[str]:
        self._ensure_parsed()
        return iter(
            [name for name, entry in self._entries.items() if entry.state is not EntryState.DELETED]
        )

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def __repr__(self) -> str:
        if not self._parsed:
            return "<CookieJar (unparsed)>"
        states = ", ".join(f"{name}:{entry.state.value}" for name, entry in self._entries.items())
        return f"<CookieJar {states}>"

    # -- Internal --

    def _ensure_parsed(self) -> None:
        if self._parsed:
            return
        for name, value in parse_cookie_header(self._source):
            self._entries.setdefault(name, CookieEntry(name=name, value=value))
        self._parsed = True

    def _live_entry(self, name: str) -> CookieEntry | None:
        self._ensure_parsed()
        entry = self._entries.get(name)
        if entry is None or entry.state is EntryState.DELETED:
            return None
        return entry

    def _ensure_mutable(self, action: str) -> None:
        if self._sealed:
            msg = (
                f"Cannot {action}: the response headers were "
                "already sent. Change cookies before returning the response."
            )
            raise InvalidStateError(msg)

    def _resolve_options(
        self,
        options: CookieOptions | Mapping[str, Any] | None,
        overrides: Mapping[str, Any],
    ) -> CookieOptions:
        return self._defaults.merge(options).merge(overrides or None)

    def _store(self, entry: CookieEntry) -> None:
        self._ensure_parsed()
        existing = self._entries.get(entry.name)
        if existing is None:
            self._entries[entry.name] = entry
            return
        existing.value = entry.value
        existing.options = entry.options
        existing.expires = entry.expires
        existing.state = entry.state

    def _validate(self, entry: CookieEntry) -> None:
        # Rendering checks the name, SameSite, domain, path and max_age.
        self._render(entry)

    @staticmethod
    def _render(entry: CookieEntry) -> str:
        options = entry.options or CookieOptions()
        return serialize_cookie(
            entry.name,
            entry.value,
            domain=options.domain,
            path=options.path,
            expires=entry.expires,
            max_age=options.max_age,
            httponly=options.httponly,
            secure=options.secure,
            samesite=options.samesite,
        )
