"""Resolve WhatsApp header dates and times into local ISO timestamps."""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Callable

_LOGGER = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S"

_DATE_SEPARATORS = re.compile(r"[/.\-]")
_MERIDIEM = re.compile(r"\s*([AP])M\s*$", re.IGNORECASE)


def resolve_timestamp(
    date_str: str,
    time_str: str,
    now: Callable[[], datetime] | None = None,
) -> str:
    """Compose ``YYYY-MM-DDTHH:MM:SS`` from a header's date and time.

    The year position is guessed from field width: a 4-digit first part is
    Y/M/D, a 4-digit third part is D/M/Y, anything else is D/M/YY in the
    2000s. Ambiguous dates such as ``02/03/04`` are always read day-first.

    Never raises. If either component cannot be read, the current local time
    is returned instead so the message still sorts and displays.
    """
    try:
        year, month, day = _split_date(date_str)
        hour, minute, second = _split_time(time_str)
    except ValueError as exc:
        _LOGGER.debug("Unparseable header timestamp %r %r: %s", date_str, time_str, exc)
        return (now or datetime.now)().strftime(TIMESTAMP_FORMAT)

    return f"{year:04d}-{month:02d}-{day:02d}T{hour:02d}:{minute:02d}:{second:02d}"


def _split_date(date_str: str) -> tuple[int, int, int]:
    """Return (year, month, day) using the field-width heuristic."""
    parts = _DATE_SEPARATORS.split(date_str.strip())
    if len(parts) != 3 or not all(p.isdigit() for p in parts):
        raise ValueError(f"expected three numeric date parts, got {parts!r}")

    first, middle, last = parts
    if len(first) == 4:
        year, month, day = first, middle, last
    elif len(last) == 4:
        year, month, day = last, middle, first
    elif len(last) <= 2:
        # D/M/YY
        year, month, day = "20" + last.zfill(2), middle, first
    else:
        raise ValueError(f"cannot place a {len(last)}-digit year in {date_str!r}")

    if len(month) > 2 or len(day) > 2:
        raise ValueError(f"month and day must be at most two digits in {date_str!r}")
    return int(year), int(month), int(day)


def _split_time(time_str: str) -> tuple[int, int, int]:
    """Return (hour, minute, second) in 24-hour form."""
    meridiem = _MERIDIEM.search(time_str)
    clock = _MERIDIEM.sub("", time_str).strip()

    parts = clock.split(":")
    if len(parts) not in (2, 3) or not all(p.isdigit() for p in parts):
        raise ValueError(f"expected H:MM or H:MM:SS, got {clock!r}")

    hour = int(parts[0])
    minute = int(parts[1])
    second = int(parts[2]) if len(parts) == 3 else 0

    if meridiem:
        suffix = meridiem.group(1).upper()
        if suffix == "P" and hour < 12:
            hour += 12
        elif suffix == "A" and hour == 12:
            hour = 0

    return hour, minute, second
