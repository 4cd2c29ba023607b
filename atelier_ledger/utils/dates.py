# utils/dates.py
"""
Calendar-date normalization.

Rows written by different app versions carry dates either as ISO text
('YYYY-MM-DD') or in the local form ('DD/MM/YYYY'). Everything that compares
or displays dates goes through this module instead of parsing on its own.

All values are `datetime.date` (no time, no zone), so date-only comparisons
cannot drift by a day.
"""
from __future__ import annotations

import re
from datetime import date, datetime
from typing import Optional, Tuple, Union
import calendar

DateLike = Union[date, datetime, str]

_ISO_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_LOCAL_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")


def _build(year: int, month: int, day: int) -> Optional[date]:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_any(value) -> Optional[date]:
    """
    Parse 'YYYY-MM-DD' or 'DD/MM/YYYY' into a date.

    Returns None (never raises) for anything else: empty text, other
    separators, out-of-range components such as month 13 or Feb 30.
    `date`/`datetime` objects are accepted as-is.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    m = _ISO_RE.match(text)
    if m:
        y, mo, d = (int(g) for g in m.groups())
        return _build(y, mo, d)
    m = _LOCAL_RE.match(text)
    if m:
        d, mo, y = (int(g) for g in m.groups())
        return _build(y, mo, d)
    return None


def to_iso(value: DateLike) -> str:
    """Storage form 'YYYY-MM-DD'. Raises ValueError when the value does not parse."""
    d = parse_any(value)
    if d is None:
        raise ValueError(f"Invalid date: {value!r}")
    return d.isoformat()


def to_localized(value: DateLike) -> str:
    """
    Display form 'DD/MM/YYYY'.

    Unparseable text is handed back unchanged so a broken legacy row still
    shows something.
    """
    d = parse_any(value)
    if d is None:
        return value if isinstance(value, str) else ""
    return f"{d.day:02d}/{d.month:02d}/{d.year:04d}"


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    """First and last calendar day of (year, month)."""
    last = calendar.monthrange(int(year), int(month))[1]
    return date(int(year), int(month), 1), date(int(year), int(month), last)


def in_range(value, start: date, end: date) -> bool:
    """
    Inclusive range check on stored date text.

    False for unparseable values and for inverted ranges (end < start).
    """
    d = parse_any(value)
    if d is None:
        return False
    return start <= d <= end
