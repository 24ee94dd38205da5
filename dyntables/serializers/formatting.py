"""
Per-type rendering of field values for human-facing exports.
"""

from typing import Any, Optional

from dyntables.core.config import ExportSettings, get_settings
from dyntables.core.enums import FieldType
from dyntables.utils.date_utils import format_datetime, parse_datetime
from dyntables.utils.validation_utils import is_blank, parse_boolean, parse_number


def format_number(value: Any) -> str:
    """Plain number without thousands separators."""
    number = parse_number(value)
    if number is None:
        return str(value)
    if isinstance(number, float) and number.is_integer():
        return str(int(number))
    return str(number)


def format_currency(value: Any, symbol: str = "$") -> str:
    number = parse_number(value)
    if number is None:
        return str(value)
    sign = "-" if number < 0 else ""
    return f"{sign}{symbol}{abs(number):,.2f}"


def format_date(value: Any, date_format: str) -> str:
    parsed = parse_datetime(value)
    return str(value) if parsed is None else format_datetime(parsed, date_format)


def format_boolean(value: Any, true_label: str = "Sí", false_label: str = "No") -> str:
    parsed = parse_boolean(value)
    if parsed is None:
        parsed = bool(value)
    return true_label if parsed else false_label


def format_file(value: Any) -> str:
    """Files are exported as a count, never as their URLs."""
    if isinstance(value, (list, tuple)):
        return f"{len(value)} archivo(s)"
    if isinstance(value, str):
        return "1 archivo" if "http" in value else value
    return "Archivo adjunto"


def format_value(value: Any, field_type: FieldType, export_settings: Optional[ExportSettings] = None) -> str:
    """
    Render a stored value as text for CSV cells.

    Args:
        value: Stored primitive
        field_type: Type of the field the value belongs to
        export_settings: Labels and formats, defaults to the configured ones

    Returns:
        Display string, empty for missing values
    """
    options = export_settings or get_settings().export

    if value is None or (is_blank(value) and not isinstance(value, (list, tuple))):
        return ""

    field_type = FieldType(field_type)
    if field_type == FieldType.DATE:
        return format_date(value, options.date_format)
    if field_type == FieldType.BOOLEAN:
        return format_boolean(value, options.true_label, options.false_label)
    if field_type == FieldType.CURRENCY:
        return format_currency(value, options.currency_symbol)
    if field_type == FieldType.NUMBER:
        return format_number(value)
    if field_type == FieldType.FILE:
        return format_file(value)
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    return str(value)
