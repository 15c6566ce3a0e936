"""Parsing of the ``since`` history filter."""

from __future__ import annotations

import re
from datetime import datetime

MALFORMED_SINCE_MESSAGE = "Malformed time in `since` parameter"

_RFC3339 = re.compile(
    r"(?P<date>\d{4}-\d{2}-\d{2})T(?P<time>\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<fraction>\d+))?"
    r"(?P<offset>Z|[+-]\d{2}:\d{2})"
)


def parse_rfc3339(value: str) -> datetime:
    """Parse a strict RFC 3339 timestamp into an aware datetime.

    Raises ValueError for anything else, including dates without a time part or
    timestamps without an offset.
    """

    match = _RFC3339.fullmatch(value)
    if match is None:
        raise ValueError(MALFORMED_SINCE_MESSAGE)

    fraction = match.group("fraction")
    micros = f".{fraction[:6].ljust(6, '0')}" if fraction else ""
    offset = match.group("offset")
    if offset == "Z":
        offset = "+00:00"

    try:
        return datetime.fromisoformat(f"{match.group('date')}T{match.group('time')}{micros}{offset}")
    except ValueError as exc:
        raise ValueError(MALFORMED_SINCE_MESSAGE) from exc


__all__ = ["MALFORMED_SINCE_MESSAGE", "parse_rfc3339"]
