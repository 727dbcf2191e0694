"""Duration strings for the new-account throttles.

Grammar: an optional sign followed by one or more ``<number><unit>`` groups,
e.g. ``"24h"``, ``"12h30m"``, ``"1.5h"``. Units are ``h``, ``m``, ``s``,
``ms``, ``us`` (or ``µs``) and ``ns``. A bare ``"0"`` is zero.
"""

from __future__ import annotations

import re
from datetime import timedelta

from safetykit.errors import DurationParseError

# Configured value meaning "block regardless of account age".
FOREVER = "-1"

_UNIT_SECONDS = {
    "h": 3600.0,
    "m": 60.0,
    "s": 1.0,
    "ms": 1e-3,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ns": 1e-9,
}

_COMPONENT = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")
_FULL = re.compile(r"[-+]?(?:(?:\d+(?:\.\d*)?|\.\d+)(?:ns|us|µs|μs|ms|s|m|h))+")

# Largest magnitude the host can store (signed 64-bit nanoseconds), about 2562047h.
_MAX_SECONDS = (2**63 - 1) / 1e9


def parse_duration(value: str) -> timedelta:
    """Parse *value* into a :class:`~datetime.timedelta`.

    Raises:
        DurationParseError: the string does not follow the grammar, or the
            duration is out of range.
    """
    text = value.strip()
    if text in ("0", "+0", "-0"):
        return timedelta(0)
    if not text or not _FULL.fullmatch(text):
        raise DurationParseError(f"failed to parse duration {value!r}")

    sign = -1 if text.startswith("-") else 1
    seconds = sum(
        float(number) * _UNIT_SECONDS[unit] for number, unit in _COMPONENT.findall(text)
    )
    if seconds > _MAX_SECONDS:
        raise DurationParseError(f"failed to parse duration {value!r}: out of range")
    return timedelta(seconds=sign * seconds)
