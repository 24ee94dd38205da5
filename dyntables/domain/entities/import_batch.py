from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from dyntables.domain.entities.table import TableField
from dyntables.domain.value_objects.errors import ImportRowError


@dataclass
class ImportBatch:
    """Rows of one spreadsheet on their way through the import pipeline."""

    headers: List[Any]
    rows: List[List[Any]]
    fields: List[TableField] = field(default_factory=list)
    records: List[Dict[str, Any]] = field(default_factory=list)
    # 1-based data row number of each entry in ``records``
    row_numbers: List[int] = field(default_factory=list)
    original_count: int = 0
    final_count: int = 0
    duplicates_removed: int = 0
    duplicate_fields: Dict[str, int] = field(default_factory=dict)

    def __post_init__(self):
        if not self.original_count:
            self.original_count = len(self.rows)


@dataclass
class ImportReport:
    """Outcome of one import. Failing rows are reported, never fatal."""

    total: int = 0
    successful: int = 0
    failed: int = 0
    errors: List[ImportRowError] = field(default_factory=list)
    duplicates_removed: int = 0
    duplicate_fields: Dict[str, int] = field(default_factory=dict)
    original_count: int = 0
    final_count: int = 0
    fields: List[TableField] = field(default_factory=list)
    table_slug: Optional[str] = None
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "table_slug": self.table_slug,
            "total": self.total,
            "successful": self.successful,
            "failed": self.failed,
            "errors": [e.to_dict() for e in self.errors],
            "duplicates_removed": self.duplicates_removed,
            "duplicate_fields": [
                {"field_name": name, "count": count} for name, count in self.duplicate_fields.items()
            ],
            "original_count": self.original_count,
            "final_count": self.final_count,
            "fields": [f.to_dict() for f in self.fields],
            "warnings": self.warnings,
        }
