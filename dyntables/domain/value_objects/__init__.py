from .errors import FieldError, ImportRowError
from .field_value import (
    FIELD_VALUE_TYPES,
    BooleanValue,
    CurrencyValue,
    DateValue,
    EmailValue,
    FieldValue,
    FieldValueError,
    FileValue,
    NumberValue,
    SelectValue,
    TextValue,
    parse_field_value,
)

__all__ = [
    "FieldError",
    "ImportRowError",
    "FIELD_VALUE_TYPES",
    "FieldValue",
    "FieldValueError",
    "TextValue",
    "EmailValue",
    "NumberValue",
    "CurrencyValue",
    "DateValue",
    "BooleanValue",
    "SelectValue",
    "FileValue",
    "parse_field_value",
]
