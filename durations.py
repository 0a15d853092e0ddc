"""
Duration grammar: turns strings like "1h30m" into milliseconds.

A duration is a run of (digits, unit) pairs with no separators.
Repeated units add up, so "1m1m" is two minutes. The empty string
is zero.
"""

import re


class DurationError(ValueError):
    """Raised when a duration string can't be parsed."""


UNITS = {
    "ms": 1,
    "s": 1_000,
    "m": 60 * 1_000,
    "h": 60 * 60 * 1_000,
    "d": 24 * 60 * 60 * 1_000,
    "w": 7 * 24 * 60 * 60 * 1_000,
    # Average month, not calendar aware.
    "mo": round(365.24 / 12 * 24 * 60 * 60 * 1_000),
}

_DIGITS = re.compile(r"[0-9]+")
_UNIT = re.compile(r"[^0-9]+")


def parse_duration(text: str) -> int:
    """Parse `text` and return the total duration in milliseconds."""
    total = 0
    pos = 0
    while pos < len(text):
        digits = _DIGITS.match(text, pos)
        if not digits:
            raise DurationError(f"expecting a number at: '{text[pos:]}'")

        unit = _UNIT.match(text, digits.end())
        if not unit:
            raise DurationError(f"trailing unparsable junk: '{text[pos:]}'")

        code = unit.group()
        if code not in UNITS:
            raise DurationError(f"unsupported duration code: {code}")

        total += int(digits.group()) * UNITS[code]
        pos = unit.end()

    return total
