"""Parse and render duration strings such as "5m", "1h30m" or "250ms"."""

from __future__ import annotations

import re
from datetime import timedelta

_UNIT_MICROSECONDS = {
    "ns": 0.001,
    "us": 1,
    "µs": 1,
    "μs": 1,
    "ms": 1_000,
    "s": 1_000_000,
    "m": 60 * 1_000_000,
    "h": 3600 * 1_000_000,
}

# One <decimal><unit> group; longer units first so "ms" wins over "m".
_COMPONENT_RE = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")


def parse_duration(text: str) -> timedelta:
    """Parse a duration string into a timedelta.

    Accepts an optional sign followed by one or more number/unit groups,
    e.g. "300ms", "-1.5h", "2h45m". The bare string "0" means zero.
    Raises ValueError for anything else, including the empty string.
    """
    if text is None:
        raise ValueError("duration must not be None")
    raw = text.strip()
    body = raw
    sign = 1
    if body[:1] in ("+", "-"):
        sign = -1 if body[0] == "-" else 1
        body = body[1:]
    if body == "0":
        return timedelta(0)
    if not body:
        raise ValueError(f"invalid duration {text!r}")

    total_us = 0.0
    pos = 0
    while pos < len(body):
        match = _COMPONENT_RE.match(body, pos)
        if not match:
            raise ValueError(f"invalid duration {text!r}")
        number, unit = match.groups()
        total_us += float(number) * _UNIT_MICROSECONDS[unit]
        pos = match.end()

    try:
        return timedelta(microseconds=sign * total_us)
    except OverflowError as exc:
        raise ValueError(f"invalid duration {text!r}: out of range") from exc


def format_duration(value: timedelta) -> str:
    """Render a timedelta the way parse_duration reads it, e.g. "1h5m0s"."""
    total_us = round(value.total_seconds() * 1_000_000)
    if total_us == 0:
        return "0s"
    sign = "-" if total_us < 0 else ""
    total_us = abs(total_us)
    if total_us < 1_000_000:
        if total_us % 1_000 == 0:
            return f"{sign}{total_us // 1_000}ms"
        return f"{sign}{total_us}us"

    hours, rem = divmod(total_us, 3600 * 1_000_000)
    minutes, rem = divmod(rem, 60 * 1_000_000)
    seconds = rem / 1_000_000
    seconds_text = f"{seconds:.6f}".rstrip("0").rstrip(".")
    out = sign
    if hours:
        out += f"{hours}h"
    if hours or minutes:
        out += f"{minutes}m"
    return f"{out}{seconds_text}s"
