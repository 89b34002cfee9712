"""
mindreport/reports/dates.py — Display formatting for stored dates.

Every date shown in a report goes through format_date(). Each call site
passes its own sentinel for absent values.

ISO strings are handled with an anchored regex before any parsing: parsing a
date-only string and converting it between timezones can move it to the
previous or next calendar day, while the regex copies the stored day as-is.
"""
from __future__ import annotations

import re
from datetime import date, datetime, timezone, tzinfo
from typing import Any

from dateutil import parser as date_parser

DIARY_DATE_SENTINEL = "Date not available"
TABLE_DATE_SENTINEL = "-"
HEADER_DATE_SENTINEL = "Date not informed"

_ISO_DATE_PREFIX = re.compile(r"^(\d{4})-(\d{2})-(\d{2})")

# Two defaults that differ in every date field; a component filled from the
# default shows up as a mismatch between the two parses.
_FIRST_DEFAULT = datetime(2000, 1, 1)
_SECOND_DEFAULT = datetime(2001, 2, 2)


def _as_display(value: date) -> str:
    return f"{value.day:02d}/{value.month:02d}/{value.year:04d}"


def format_date(value: Any, sentinel: str, tz: tzinfo | None = None) -> str:
    """
    Format a stored date as DD/MM/YYYY.

    Args:
        value: date, datetime, string, or None.
        sentinel: Returned when the value is absent.
        tz: Display timezone for timezone-aware values. Naive datetimes are
            shown as stored.

    Returns:
        The formatted date, the sentinel, or the original value as text when
        it cannot be read as a date.
    """
    if value is None or value == "":
        return sentinel

    if isinstance(value, datetime):
        if value.tzinfo is not None and tz is not None:
            value = value.astimezone(tz)
        return _as_display(value)

    if isinstance(value, date):
        return _as_display(value)

    if isinstance(value, str):
        match = _ISO_DATE_PREFIX.match(value)
        if match:
            year, month, day = match.groups()
            return f"{day}/{month}/{year}"
        return _parse_fallback(value, tz)

    return str(value)


def _parse_fallback(text: str, tz: tzinfo | None) -> str:
    """
    Best-effort parse for non-ISO strings, read day-first.

    The text must name the day, month and year itself: anything dateutil
    would complete from its defaults ("March", "10", "12:30") is returned
    unchanged. A string without a timezone marker is taken as UTC and shown
    on its UTC calendar day; only strings with an explicit offset are moved
    to `tz`.
    """
    try:
        parsed = date_parser.parse(text, dayfirst=True, default=_FIRST_DEFAULT)
        check = date_parser.parse(text, dayfirst=True, default=_SECOND_DEFAULT)
    except (ValueError, OverflowError):
        return text
    if parsed.date() != check.date():
        return text

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    elif tz is not None:
        parsed = parsed.astimezone(tz)
    return _as_display(parsed)
