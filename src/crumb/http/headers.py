"""Read-only view over the ASGI request header list.

Only lookup is offered: the request needs its ``Cookie`` fields and a
few single-valued headers, nothing that iterates or counts them.
"""

from __future__ import annotations

from collections.abc import Iterable


class Headers:
    """Case-insensitive lookup over raw ``(name, value)`` byte pairs.

    Values are decoded as latin-1 on access. Repeated fields keep their
    arrival order.
    """

    __slots__ = ("_raw",)

    def __init__(self, raw: tuple[tuple[bytes, bytes], ...] = ()) -> None:
        self._raw = raw

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[str, str]]) -> Headers:
        """Build headers from decoded ``(name, value)`` string pairs."""
        return cls(
            tuple((name.lower().encode("latin-1"), value.encode("latin-1")) for name, value in pairs)
        )

    def get(self, name: str, default: str | None = None) -> str | None:
        """Return the first value for *name*, or *default* if missing."""
        values = self.get_list(name)
        return values[0] if values else default

    def get_list(self, name: str) -> list[str]:
        """Return every value for *name*, in arrival order."""
        wanted = name.lower().encode("latin-1")
        return [value.decode("latin-1") for key, value in self._raw if key.lower() == wanted]

    def cookie_header(self) -> str:
        """All ``Cookie`` fields folded into one header value.

        HTTP/2 clients may split cookies over several ``cookie`` fields;
        they are joined with ``"; "`` so the parser sees every pair.
        """
        return "; ".join(value for value in self.get_list("cookie") if value)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and bool(self.get_list(name))

    def __repr__(self) -> str:
        names = sorted({key.decode("latin-1").lower() for key, _ in self._raw})
        return f"Headers({', '.join(names)})"

    @property
    def raw(self) -> tuple[tuple[bytes, bytes], ...]:
        """Raw header byte pairs, as received from ASGI."""
        return self._raw
