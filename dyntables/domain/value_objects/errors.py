from dataclasses import dataclass, field
from typing import Any, Dict, List

from dyntables.core.enums import FieldErrorReason


@dataclass(frozen=True)
class FieldError:
    """One rejected field of a record."""

    field: str
    reason: FieldErrorReason
    message: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "field": self.field,
            "reason": FieldErrorReason(self.reason).value,
            "message": self.message,
        }


@dataclass
class ImportRowError:
    """A spreadsheet row that was not stored. ``row_index`` is the 1-based data row."""

    row_index: int
    reason: str
    field_errors: List[FieldError] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "row_index": self.row_index,
            "reason": self.reason,
            "field_errors": [e.to_dict() for e in self.field_errors],
        }
