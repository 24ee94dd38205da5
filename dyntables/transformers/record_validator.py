"""
Record validation against a table schema.

The validator is pure: it never raises on bad data and never touches a
store. It reports every violation at once so callers can show them all.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from dyntables.core.config import get_settings
from dyntables.core.enums import FieldErrorReason
from dyntables.domain.entities.table import Table
from dyntables.domain.value_objects.errors import FieldError
from dyntables.domain.value_objects.field_value import FieldValue, FieldValueError, parse_field_value
from dyntables.utils.validation_utils import is_blank


@dataclass
class ValidationOutcome:
    values: Dict[str, FieldValue] = field(default_factory=dict)
    errors: List[FieldError] = field(default_factory=list)
    # Optional fields supplied blank, stored as None
    cleared: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def data(self) -> Dict[str, Any]:
        """Primitive storage form of the validated values."""
        primitives = {name: value.to_primitive() for name, value in self.values.items()}
        for name in self.cleared:
            primitives[name] = None
        return primitives


class RecordValidator:
    """
    Checks record data against the fields of its table and converts it
    into typed values.

    Args:
        strict_select: Reject select values outside the field options
        strict_email: Reject email values that do not look like addresses
    """

    def __init__(self, strict_select: Optional[bool] = None, strict_email: Optional[bool] = None):
        settings = get_settings()
        self.strict_select = settings.validation.strict_select if strict_select is None else strict_select
        self.strict_email = settings.validation.strict_email if strict_email is None else strict_email

    def validate_and_coerce(self, table: Table, data: Dict[str, Any]) -> ValidationOutcome:
        outcome = ValidationOutcome()

        for table_field in table.fields:
            raw = data.get(table_field.name)

            if is_blank(raw):
                if table_field.required:
                    outcome.errors.append(FieldError(
                        field=table_field.name,
                        reason=FieldErrorReason.MISSING_REQUIRED,
                        message=f"'{table_field.label}' is required",
                    ))
                elif table_field.name in data:
                    outcome.cleared.append(table_field.name)
                continue

            try:
                outcome.values[table_field.name] = parse_field_value(
                    table_field.type,
                    raw,
                    choices=table_field.options,
                    strict_select=self.strict_select,
                    strict_email=self.strict_email,
                )
            except FieldValueError as e:
                outcome.errors.append(FieldError(field=table_field.name, reason=e.reason, message=e.message))

        declared = set(table.field_names)
        for key in data:
            if key not in declared:
                outcome.errors.append(FieldError(
                    field=key,
                    reason=FieldErrorReason.UNKNOWN_FIELD,
                    message=f"'{key}' is not a field of table '{table.slug}'",
                ))

        return outcome

    def validate(self, table: Table, data: Dict[str, Any]) -> List[FieldError]:
        return self.validate_and_coerce(table, data).errors


def apply_defaults(table: Table, data: Dict[str, Any]) -> Dict[str, Any]:
    """Fill absent fields that declare a default value."""
    merged = dict(data)
    for table_field in table.fields:
        if table_field.default_value is not None and is_blank(merged.get(table_field.name)):
            merged[table_field.name] = table_field.default_value
    return merged


def validate(table: Table, data: Dict[str, Any]) -> List[FieldError]:
    return RecordValidator().validate(table, data)


def validate_and_coerce(table: Table, data: Dict[str, Any]) -> ValidationOutcome:
    return RecordValidator().validate_and_coerce(table, data)
