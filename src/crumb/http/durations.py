"""Expiry resolution for cookie options.

``expires`` accepts three shapes:

- a ``datetime`` (used as-is, naive values are taken as UTC)
- a number of milliseconds since the Unix epoch
- a human duration such as ``"30 days"``, ``"2 weeks"`` or ``"1.5h"``,
  counted from the moment the cookie is set

Duration strings go through a small grammar, ``<number><space?><unit>``,
and come back as a structured ``Duration`` so the unit table is the only
place new spellings need to be added.
"""

import re
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum

from crumb.errors import ParseError

_SECOND = 1000
_MINUTE = 60 * _SECOND
_HOUR = 60 * _MINUTE
_DAY = 24 * _HOUR


class DurationUnit(Enum):
    """Recognized duration units, valued in milliseconds."""

    MILLISECOND = 1
    SECOND = _SECOND
    MINUTE = _MINUTE
    HOUR = _HOUR
    DAY = _DAY
    WEEK = 7 * _DAY
    MONTH = 30 * _DAY
    YEAR = 365 * _DAY

    @property
    def milliseconds(self) -> int:
        return self.value


_UNIT_ALIASES: dict[str, DurationUnit] = {
    "ms": DurationUnit.MILLISECOND,
    "s": DurationUnit.SECOND,
    "sec": DurationUnit.SECOND,
    "second": DurationUnit.SECOND,
    "seconds": DurationUnit.SECOND,
    "m": DurationUnit.MINUTE,
    "min": DurationUnit.MINUTE,
    "minute": DurationUnit.MINUTE,
    "minutes": DurationUnit.MINUTE,
    "h": DurationUnit.HOUR,
    "hour": DurationUnit.HOUR,
    "hours": DurationUnit.HOUR,
    "d": DurationUnit.DAY,
    "day": DurationUnit.DAY,
    "days": DurationUnit.DAY,
    "w": DurationUnit.WEEK,
    "week": DurationUnit.WEEK,
    "weeks": DurationUnit.WEEK,
    "month": DurationUnit.MONTH,
    "months": DurationUnit.MONTH,
    "y": DurationUnit.YEAR,
    "year": DurationUnit.YEAR,
    "years": DurationUnit.YEAR,
}

_DURATION_RE = re.compile(r"^(?P<amount>-?(?:\d+\.?\d*|\.\d+))\s*(?P<unit>[a-z]+)$")

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


@dataclass(frozen=True, slots=True)
class Duration:
    """A parsed duration: a magnitude and its unit."""

    amount: float
    unit: DurationUnit

    @property
    def milliseconds(self) -> float:
        return self.amount * self.unit.milliseconds

    def to_timedelta(self) -> timedelta:
        return timedelta(milliseconds=self.milliseconds)


def parse_duration(text: str) -> Duration:
    """Parse a human duration like ``"1 month"`` into a ``Duration``.

    Units are case-insensitive. The unit is required: a bare number is
    ambiguous and is rejected along with unknown units.

    Raises:
        ParseError: If the magnitude is not numeric or the unit is unknown.
    """
    match = _DURATION_RE.match(text.strip().lower())
    if match is None:
        msg = f"Invalid duration {text!r}: expected '<number> <unit>', e.g. '30 days'"
        raise ParseError(msg)
    unit = _UNIT_ALIASES.get(match["unit"])
    if unit is None:
        msg = f"Invalid duration {text!r}: unknown unit {match['unit']!r}"
        raise ParseError(msg)
    return Duration(amount=float(match["amount"]), unit=unit)


def resolve_expires(value: datetime | int | float | str, now: datetime) -> datetime:
    """Resolve an ``expires`` option to an aware UTC datetime.

    ``now`` is the reference time for relative durations; the jar passes
    the time of the ``set()`` call.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)
    # bool is an int subclass, but True is not a timestamp
    if isinstance(value, bool):
        msg = f"Invalid expires value {value!r}"
        raise ParseError(msg)
    try:
        if isinstance(value, int | float):
            return EPOCH + timedelta(milliseconds=value)
        if isinstance(value, str):
            return now + parse_duration(value).to_timedelta()
    except ParseError:
        raise
    except (OverflowError, ValueError) as exc:
        # Too far from the epoch for datetime, or not finite
        msg = f"Invalid expires value {value!r}: out of range"
        raise ParseError(msg) from exc
    msg = f"Invalid expires value {value!r}: expected datetime, epoch milliseconds, or duration"
    raise ParseError(msg)
