import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from dyntables.core.enums import SortDirection
from dyntables.domain.entities.record import Record


@dataclass
class RecordQuery:
    """
    Filter, search, sort and pagination parameters for a record listing.

    ``filters`` maps a field name to either an exact value or a range dict
    with ``gte`` and/or ``lte`` bounds.
    """

    filters: Dict[str, Any] = field(default_factory=dict)
    search: Optional[str] = None
    page: int = 1
    page_size: int = 10
    sort_field: str = "created_at"
    sort_dir: SortDirection = SortDirection.DESC

    def __post_init__(self):
        self.sort_dir = SortDirection(self.sort_dir)
        self.page = max(1, int(self.page))
        self.page_size = max(1, int(self.page_size))


@dataclass
class QueryResult:
    records: List[Record]
    total: int
    page: int
    page_size: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.page_size) if self.page_size else 0

    @property
    def has_next(self) -> bool:
        return self.page < self.pages

    def to_dict(self) -> Dict[str, Any]:
        return {
            "records": [r.to_dict() for r in self.records],
            "total": self.total,
            "page": self.page,
            "page_size": self.page_size,
            "pages": self.pages,
        }
