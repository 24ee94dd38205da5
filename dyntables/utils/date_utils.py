"""
Date and time utilities.
Provides parsing of loosely formatted spreadsheet dates, Excel serial date
conversion and export formatting. All datetimes handled by the engine are
naive UTC.
"""

import re
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Optional

from dateutil import parser
from dateutil.parser import isoparse

# Excel counts days from 1899-12-30 (it keeps the 1900 leap-year bug)
EXCEL_EPOCH = datetime(1899, 12, 30)

# Serial numbers outside this window are not treated as Excel dates
EXCEL_SERIAL_MIN = 1
EXCEL_SERIAL_MAX = 100000

_HAS_DIGIT = re.compile(r"\d")
_NUMERIC = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")
_DAY_FIRST = re.compile(r"^\d{1,2}[/.-]\d{1,2}[/.-]\d{2,4}")


def utcnow() -> datetime:
    """Current time as naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(dt: datetime) -> datetime:
    """Convert an aware datetime to naive UTC, leave naive ones untouched."""
    if dt.tzinfo is not None:
        return dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def parse_datetime(value: Any, dayfirst: bool = True) -> Optional[datetime]:
    """
    Parse a value into a datetime.

    ISO 8601 strings are parsed strictly first. Slash or dot separated dates
    such as ``15/01/2024`` are read day first. Pure numbers and strings
    without any digit are never treated as dates.

    Args:
        value: datetime, date or string to parse
        dayfirst: Whether ambiguous ``dd/mm/yyyy`` strings are day first

    Returns:
        Parsed naive UTC datetime or None if the value is not a date
    """
    if isinstance(value, datetime):
        return to_naive_utc(value)

    if isinstance(value, date):
        return datetime.combine(value, time.min)

    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text or not _HAS_DIGIT.search(text) or _NUMERIC.match(text):
        return None

    try:
        return to_naive_utc(isoparse(text))
    except (ValueError, OverflowError):
        pass

    try:
        parsed = parser.parse(text, dayfirst=dayfirst and bool(_DAY_FIRST.match(text)))
    except (ValueError, OverflowError, TypeError):
        return None

    return to_naive_utc(parsed)


def is_excel_serial(value: Any) -> bool:
    """Check whether a number looks like an Excel serial date."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return EXCEL_SERIAL_MIN < value < EXCEL_SERIAL_MAX


def excel_serial_to_datetime(serial: float) -> datetime:
    """Convert an Excel serial day number to a datetime."""
    return EXCEL_EPOCH + timedelta(days=float(serial))


def format_datetime(dt: Optional[datetime], format_string: str = "%d/%m/%Y, %H:%M:%S") -> str:
    """
    Format datetime to string.

    Args:
        dt: Datetime object to format
        format_string: Format string

    Returns:
        Formatted datetime string, empty for None
    """
    if dt is None:
        return ""
    return dt.strftime(format_string)


def days_ago(days: int, now: Optional[datetime] = None) -> datetime:
    """Start of the window covering the last ``days`` days."""
    return (now or utcnow()) - timedelta(days=days)
