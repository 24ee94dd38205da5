"""
Utilities module for the record engine.
Contains common parsing and formatting helpers.
"""

from .date_utils import (
    utcnow,
    parse_datetime,
    excel_serial_to_datetime,
    format_datetime,
    days_ago,
)
from .validation_utils import (
    is_blank,
    parse_number,
    parse_boolean,
    is_email,
    is_uri,
)
from .text_utils import (
    slugify,
    table_slug,
    field_name,
)

__all__ = [
    "utcnow",
    "parse_datetime",
    "excel_serial_to_datetime",
    "format_datetime",
    "days_ago",
    "is_blank",
    "parse_number",
    "parse_boolean",
    "is_email",
    "is_uri",
    "slugify",
    "table_slug",
    "field_name",
]
