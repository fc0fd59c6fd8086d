from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]

STATUS_DATE_FORMAT = "%B %d, %Y"

_LEADING_ON = re.compile(r"^\s*(?:As of|On)\s+", re.IGNORECASE)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_status_date(text: str | None, *, clock: Clock = utc_now) -> datetime:
    """Return the date a status body text opens with.

    Status paragraphs read like ``"On August 23, 2016, we mailed ..."``: the
    first two comma-delimited fields hold the date. Anything that does not
    parse falls back to ``clock()``.
    """

    candidate = (text or "").strip()
    if not candidate:
        return clock()

    fields = candidate.split(",")
    if len(fields) < 2:
        return clock()

    token = f"{fields[0]}, {fields[1]}"
    token = _LEADING_ON.sub("", token)
    token = re.sub(r"\s+", " ", token).strip()

    try:
        parsed = datetime.strptime(token, STATUS_DATE_FORMAT)
    except ValueError:
        return clock()
    return parsed.replace(tzinfo=timezone.utc)


def _ordinal(day: int) -> str:
    if 11 <= day % 100 <= 13:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")
    return f"{day}{suffix}"


def day_label(value: datetime) -> str:
    """Return a label such as ``"Tuesday, August 23rd 2016"``."""

    value = _as_utc(value)
    return f"{value:%A}, {value:%B} {_ordinal(value.day)} {value.year}"


def day_epoch(value: datetime) -> int:
    """Return the unix time of the UTC midnight starting ``value``'s day."""

    value = _as_utc(value)
    midnight = value.replace(hour=0, minute=0, second=0, microsecond=0)
    return int(midnight.timestamp())


def unix_time(value: datetime) -> int:
    return int(_as_utc(value).timestamp())


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


__all__ = [
    "Clock",
    "STATUS_DATE_FORMAT",
    "day_epoch",
    "day_label",
    "parse_status_date",
    "unix_time",
    "utc_now",
]
