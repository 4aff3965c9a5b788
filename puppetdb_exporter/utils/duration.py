"""Parsing of Go-style duration strings such as ``2h`` or ``1h30m``."""

import re
from datetime import timedelta

_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

# Durations are signed 64-bit nanosecond counts, as in Go
MAX_DURATION_SECONDS = (2 ** 63 - 1) / 1e9

# Longest units first so "ms" is not read as "m" followed by "s"
_COMPONENT = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|h|m|s)")


def parse_duration(value: str) -> timedelta:
    """
    Parse a duration string.

    A duration is an optional sign followed by one or more decimal numbers,
    each with a unit suffix: ``300ms``, ``1.5h``, ``2h45m``. Valid units are
    ``ns``, ``us`` (or ``µs``), ``ms``, ``s``, ``m`` and ``h``. The bare
    string ``0`` is also accepted. Durations longer than about
    2562047 hours are rejected.

    Args:
        value: Duration string

    Returns:
        timedelta: Parsed duration

    Raises:
        ValueError: If the string is not a valid duration
    """
    text = value.strip()
    original = text

    sign = 1
    if text[:1] in ("+", "-"):
        sign = -1 if text[0] == "-" else 1
        text = text[1:]

    if text == "0":
        return timedelta(0)
    if not text:
        raise ValueError(f"invalid duration: {original!r}")

    seconds = 0.0
    position = 0
    while position < len(text):
        match = _COMPONENT.match(text, position)
        if match is None:
            raise ValueError(f"invalid duration: {original!r}")
        seconds += float(match.group(1)) * _UNITS[match.group(2)]
        position = match.end()

    if seconds > MAX_DURATION_SECONDS:
        raise ValueError(f"invalid duration: {original!r} is out of range")

    return timedelta(seconds=sign * seconds)
