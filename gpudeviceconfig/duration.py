"""Durations in nanoseconds with the textual form used in configuration files."""

from __future__ import annotations

import re
from fractions import Fraction
from typing import Any

_NANOSECOND = 1
_MICROSECOND = 1_000 * _NANOSECOND
_MILLISECOND = 1_000 * _MICROSECOND
_SECOND = 1_000 * _MILLISECOND
_MINUTE = 60 * _SECOND
_HOUR = 60 * _MINUTE

_MAX_DURATION = (1 << 63) - 1

_UNITS = {
    "ns": _NANOSECOND,
    "us": _MICROSECOND,
    "\u00b5s": _MICROSECOND,
    "\u03bcs": _MICROSECOND,
    "ms": _MILLISECOND,
    "s": _SECOND,
    "m": _MINUTE,
    "h": _HOUR,
}

_COMPONENT = re.compile(r"(\d*)(?:\.(\d*))?([^\d.]*)")


class Duration(int):
    """A signed duration counted in nanoseconds."""

    @classmethod
    def from_json(cls, value: Any) -> Duration:
        """Build a duration from a JSON number (nanoseconds) or duration string."""
        if isinstance(value, bool):
            raise ValueError("invalid duration")
        if isinstance(value, (int, float)):
            return cls(int(value))
        if isinstance(value, str):
            return cls(parse_duration(value))
        raise ValueError("invalid duration")

    def to_json(self) -> str:
        return format_duration(self)

    def __str__(self) -> str:
        return format_duration(self)

    def __repr__(self) -> str:
        return f"Duration({int(self)})"


def parse_duration(text: str) -> Duration:
    """Parse a string such as ``"1h30m"``, ``"1.5s"`` or ``"-250ms"``."""
    s = text
    negative = False
    if s[:1] in ("-", "+"):
        negative = s[0] == "-"
        s = s[1:]
    if s == "0":
        return Duration(0)
    if not s:
        raise ValueError(f"invalid duration {text!r}")

    total = 0
    pos = 0
    while pos < len(s):
        match = _COMPONENT.match(s, pos)
        whole, fraction, unit = match.groups()
        if not whole and not fraction:
            raise ValueError(f"invalid duration {text!r}")
        if not unit:
            raise ValueError(f"missing unit in duration {text!r}")
        scale = _UNITS.get(unit)
        if scale is None:
            raise ValueError(f"unknown unit {unit!r} in duration {text!r}")

        value = Fraction(int(whole or "0"))
        if fraction:
            value += Fraction(int(fraction), 10 ** len(fraction))
        total += int(value * scale)
        if total > _MAX_DURATION + 1:
            raise ValueError(f"invalid duration {text!r}")
        pos = match.end()

    if negative:
        return Duration(-total)
    if total > _MAX_DURATION:
        raise ValueError(f"invalid duration {text!r}")
    return Duration(total)


def _with_fraction(value: int, unit: int) -> str:
    whole, rest = divmod(value, unit)
    if not rest:
        return str(whole)
    digits = len(str(unit)) - 1
    return f"{whole}." + f"{rest:0{digits}d}".rstrip("0")


def format_duration(nanoseconds: int) -> str:
    """Render nanoseconds in the canonical form, e.g. ``"1h2m3.5s"``."""
    ns = int(nanoseconds)
    if ns == 0:
        return "0s"
    sign = "-" if ns < 0 else ""
    magnitude = abs(ns)

    if magnitude < _SECOND:
        if magnitude < _MICROSECOND:
            return f"{sign}{magnitude}ns"
        if magnitude < _MILLISECOND:
            return f"{sign}{_with_fraction(magnitude, _MICROSECOND)}\u00b5s"
        return f"{sign}{_with_fraction(magnitude, _MILLISECOND)}ms"

    hours, rest = divmod(magnitude, _HOUR)
    minutes, rest = divmod(rest, _MINUTE)
    seconds = _with_fraction(rest, _SECOND) + "s"
    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}"
    if minutes:
        return f"{sign}{minutes}m{seconds}"
    return sign + seconds