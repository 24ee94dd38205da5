"""
Typed field values.

The validator turns untyped input into one of these values per field type.
Each value knows its field type, holds the native Python value and renders
the JSON-safe primitive that the stores persist.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, ClassVar, Dict, List, Sequence, Type, Union

from dyntables.core.enums import FieldErrorReason, FieldType
from dyntables.utils.date_utils import excel_serial_to_datetime, is_excel_serial, parse_datetime
from dyntables.utils.validation_utils import is_email, is_uri, parse_boolean, parse_number


class FieldValueError(ValueError):
    """Raised when a raw value cannot become a typed value."""

    def __init__(self, reason: FieldErrorReason, message: str):
        self.reason = reason
        self.message = message
        super().__init__(message)


def _as_text(raw: Any) -> str:
    if isinstance(raw, str):
        return raw
    if isinstance(raw, bool):
        raise FieldValueError(FieldErrorReason.INVALID_TEXT, "Expected text, got a boolean")
    if isinstance(raw, float) and raw.is_integer():
        return str(int(raw))
    if isinstance(raw, (int, float)):
        return str(raw)
    raise FieldValueError(FieldErrorReason.INVALID_TEXT, f"Expected text, got {type(raw).__name__}")


@dataclass(frozen=True)
class FieldValue:
    field_type: ClassVar[FieldType]
    value: Any

    @classmethod
    def parse(cls, raw: Any, **options: Any) -> "FieldValue":
        raise NotImplementedError

    def to_primitive(self) -> Any:
        return self.value


@dataclass(frozen=True)
class TextValue(FieldValue):
    field_type: ClassVar[FieldType] = FieldType.TEXT
    value: str

    @classmethod
    def parse(cls, raw: Any, **options: Any) -> "TextValue":
        return cls(_as_text(raw))


@dataclass(frozen=True)
class EmailValue(FieldValue):
    field_type: ClassVar[FieldType] = FieldType.EMAIL
    value: str

    @classmethod
    def parse(cls, raw: Any, strict_email: bool = False, **options: Any) -> "EmailValue":
        text = _as_text(raw).strip()
        if strict_email and not is_email(text):
            raise FieldValueError(FieldErrorReason.INVALID_EMAIL, f"'{text}' is not a valid email address")
        return cls(text)


@dataclass(frozen=True)
class NumberValue(FieldValue):
    field_type: ClassVar[FieldType] = FieldType.NUMBER
    value: Union[int, float]

    @classmethod
    def parse(cls, raw: Any, **options: Any) -> "NumberValue":
        number = parse_number(raw)
        if number is None:
            raise FieldValueError(FieldErrorReason.INVALID_NUMBER, f"'{raw}' is not a number")
        return cls(number)


@dataclass(frozen=True)
class CurrencyValue(NumberValue):
    field_type: ClassVar[FieldType] = FieldType.CURRENCY


@dataclass(frozen=True)
class DateValue(FieldValue):
    field_type: ClassVar[FieldType] = FieldType.DATE
    value: datetime

    @classmethod
    def parse(cls, raw: Any, **options: Any) -> "DateValue":
        # Numbers inside the Excel serial window are serial days
        if is_excel_serial(raw):
            return cls(excel_serial_to_datetime(raw))
        parsed = parse_datetime(raw)
        if parsed is None:
            raise FieldValueError(FieldErrorReason.INVALID_DATE, f"'{raw}' is not a valid date")
        return cls(parsed)

    def to_primitive(self) -> str:
        return self.value.isoformat()


@dataclass(frozen=True)
class BooleanValue(FieldValue):
    field_type: ClassVar[FieldType] = FieldType.BOOLEAN
    value: bool

    @classmethod
    def parse(cls, raw: Any, **options: Any) -> "BooleanValue":
        parsed = parse_boolean(raw)
        if parsed is None:
            raise FieldValueError(FieldErrorReason.INVALID_BOOLEAN, f"'{raw}' is not a boolean")
        return cls(parsed)


@dataclass(frozen=True)
class SelectValue(FieldValue):
    field_type: ClassVar[FieldType] = FieldType.SELECT
    value: str

    @classmethod
    def parse(
        cls,
        raw: Any,
        choices: Sequence[str] = (),
        strict_select: bool = False,
        **options: Any,
    ) -> "SelectValue":
        text = _as_text(raw)
        if strict_select and choices and text not in choices:
            raise FieldValueError(
                FieldErrorReason.INVALID_OPTION,
                f"'{text}' is not one of: {', '.join(choices)}",
            )
        return cls(text)


@dataclass(frozen=True)
class FileValue(FieldValue):
    field_type: ClassVar[FieldType] = FieldType.FILE
    value: List[str]

    @classmethod
    def parse(cls, raw: Any, **options: Any) -> "FileValue":
        items = [raw] if isinstance(raw, str) else raw
        if not isinstance(items, (list, tuple)):
            raise FieldValueError(FieldErrorReason.INVALID_FILE, "Expected a list of file URIs")

        invalid = [item for item in items if not is_uri(item)]
        if invalid:
            raise FieldValueError(
                FieldErrorReason.INVALID_FILE,
                f"Not a file URI: {', '.join(str(i) for i in invalid)}",
            )
        return cls([item.strip() for item in items])

    def to_primitive(self) -> List[str]:
        return list(self.value)


FIELD_VALUE_TYPES: Dict[FieldType, Type[FieldValue]] = {
    FieldType.TEXT: TextValue,
    FieldType.EMAIL: EmailValue,
    FieldType.NUMBER: NumberValue,
    FieldType.DATE: DateValue,
    FieldType.BOOLEAN: BooleanValue,
    FieldType.SELECT: SelectValue,
    FieldType.CURRENCY: CurrencyValue,
    FieldType.FILE: FileValue,
}


def parse_field_value(field_type: FieldType, raw: Any, **options: Any) -> FieldValue:
    """Build the typed value for ``field_type``, raising FieldValueError on bad input."""
    return FIELD_VALUE_TYPES[FieldType(field_type)].parse(raw, **options)
