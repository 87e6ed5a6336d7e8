"""Cookie header parsing and Set-Cookie serialization.

Consolidates the read side (``parse_cookie_header``, used by the jar to
load the request's cookies) and the write side (``serialize_cookie``,
used by the jar to emit changes) in one module, along with the
``CookieOptions`` attribute set both sides share.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from datetime import UTC, datetime
from email.utils import format_datetime
from typing import Any, TypeAlias
from urllib.parse import quote, unquote

from crumb.errors import ParseError

logger = logging.getLogger("crumb.cookies")

# RFC 7230 token characters
_TOKEN_RE = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")
# Visible ASCII other than ";"
_ATTRIBUTE_UNSAFE_RE = re.compile(r"[^\x21-\x3a\x3c-\x7e]")

# Printable ASCII minus the characters that would break a Set-Cookie line
# or make percent-decoding ambiguous.
_VALUE_SAFE = "".join(
    chr(c) for c in range(0x21, 0x7F) if chr(c) not in {"%", ";", ",", "\\"}
)

_SAMESITE_VALUES = {"lax": "Lax", "none": "None", "strict": "Strict"}

SameSite: TypeAlias = str | bool | None
Expires: TypeAlias = datetime | int | float | str | None


@dataclass(frozen=True, slots=True)
class CookieOptions:
    """Attributes for one ``Set-Cookie`` line.

    Every field defaults to ``None``, meaning "not supplied": the
    attribute is left off the header, and ``merge()`` inherits it from
    the base option set.
    """

    domain: str | None = None
    path: str | None = None
    expires: Expires = None
    max_age: int | None = None
    httponly: bool | None = None
    secure: bool | None = None
    samesite: SameSite = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> CookieOptions:
        """Build options from a plain mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})

    def merge(self, other: CookieOptions | Mapping[str, Any] | None) -> CookieOptions:
        """Return these options overlaid with every field *other* supplies."""
        if other is None:
            return self
        if not isinstance(other, CookieOptions):
            other = CookieOptions.from_mapping(other)
        changes = {
            f.name: getattr(other, f.name)
            for f in fields(other)
            if getattr(other, f.name) is not None
        }
        return replace(self, **changes) if changes else self


# -- Read side --


def parse_cookie_header(header: str) -> list[tuple[str, str]]:
    """Parse a ``Cookie`` header value into ordered ``(name, value)`` pairs.

    Best effort: pairs without ``=`` or with an empty name are skipped,
    and when a name repeats the leftmost pair wins. Values are
    percent-decoded and stripped of surrounding double quotes
    (``encode_value`` escapes a quoted value so it survives this).
    """
    if not header:
        return []
    pairs: list[tuple[str, str]] = []
    seen: set[str] = set()
    for chunk in header.split(";"):
        chunk = chunk.strip()
        if not chunk:
            continue
        if "=" not in chunk:
            logger.debug("Skipping malformed cookie pair %r", chunk)
            continue
        name, _, value = chunk.partition("=")
        name = name.strip()
        if not name:
            logger.debug("Skipping cookie pair with empty name %r", chunk)
            continue
        if name in seen:
            continue
        seen.add(name)
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] == '"':
            value = value[1:-1]
        pairs.append((name, decode_value(value)))
    return pairs


def decode_value(value: str) -> str:
    """Percent-decode a cookie value. Escapes that are not valid UTF-8 are left as-is."""
    if "%" not in value:
        return value
    try:
        return unquote(value, errors="strict")
    except UnicodeDecodeError:
        return value


# -- Write side --


def encode_value(value: str) -> str:
    """Percent-encode the characters a cookie value cannot carry raw.

    A value wrapped in double quotes gets both quotes escaped, so the
    parser does not unwrap it on the way back in.
    """
    encoded = quote(value, safe=_VALUE_SAFE)
    if len(encoded) >= 2 and encoded[0] == encoded[-1] == '"':
        encoded = f"%22{encoded[1:-1]}%22"
    return encoded


def format_http_date(when: datetime) -> str:
    """Format *when* as an RFC 1123 date, e.g. ``Thu, 01 Jan 1970 00:00:00 GMT``."""
    if when.tzinfo is None:
        when = when.replace(tzinfo=UTC)
    return format_datetime(when.astimezone(UTC).replace(microsecond=0), usegmt=True)


def normalize_samesite(samesite: SameSite) -> str | None:
    """Map a SameSite option to its wire spelling, or ``None`` to omit it."""
    if samesite is None or samesite is False:
        return None
    if samesite is True:
        return "Strict"
    normalized = _SAMESITE_VALUES.get(str(samesite).lower())
    if normalized is None:
        msg = f"Invalid SameSite value {samesite!r}: expected 'lax', 'none', 'strict', or a bool"
        raise ParseError(msg)
    return normalized


def validate_name(name: str) -> None:
    """Raise ``ParseError`` unless *name* is a valid cookie name (an RFC 7230 token)."""
    if not _TOKEN_RE.match(name):
        msg = f"Invalid cookie name {name!r}"
        raise ParseError(msg)


def _validate_attribute(label: str, value: str) -> None:
    if _ATTRIBUTE_UNSAFE_RE.search(value):
        msg = f"Invalid cookie {label} {value!r}: only visible ASCII other than ';' is allowed"
        raise ParseError(msg)


def _validate_max_age(max_age: object) -> int:
    # bool is an int subclass, but True is not a lifetime
    if isinstance(max_age, bool) or not isinstance(max_age, int | float):
        msg = f"Invalid cookie max_age {max_age!r}: expected a number of seconds"
        raise ParseError(msg)
    if not math.isfinite(max_age):
        msg = f"Invalid cookie max_age {max_age!r}: must be finite"
        raise ParseError(msg)
    return int(max_age)


def serialize_cookie(
    name: str,
    value: str,
    *,
    domain: str | None = None,
    path: str | None = None,
    expires: datetime | None = None,
    max_age: int | None = None,
    httponly: bool | None = None,
    secure: bool | None = None,
    samesite: SameSite = None,
) -> str:
    """Serialize one cookie to a ``Set-Cookie`` header value.

    Attributes appear in a fixed order (Domain, Path, Expires, Max-Age,
    HttpOnly, Secure, SameSite) and only when supplied.
    """
    validate_name(name)
    parts = [f"{name}={encode_value(value)}"]
    if domain:
        _validate_attribute("domain", domain)
        parts.append(f"Domain={domain}")
    if path:
        _validate_attribute("path", path)
        parts.append(f"Path={path}")
    if expires is not None:
        parts.append(f"Expires={format_http_date(expires)}")
    if max_age is not None:
        parts.append(f"Max-Age={_validate_max_age(max_age)}")
    if httponly:
        parts.append("HttpOnly")
    if secure:
        parts.append("Secure")
    same_site = normalize_samesite(samesite)
    if same_site:
        parts.append(f"SameSite={same_site}")
    return "; ".join(parts)
