from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional
from uuid import uuid4

from dyntables.utils.date_utils import parse_datetime, utcnow


@dataclass
class Record:
    """A row of a dynamic table. ``data`` only ever holds validated primitives."""

    table_slug: str
    c_name: str
    data: Dict[str, Any] = field(default_factory=dict)
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    id: str = field(default_factory=lambda: str(uuid4()))
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def get(self, key: str, default: Any = None) -> Any:
        """Resolve a data key or one of the record's own timestamps."""
        if key == "created_at":
            return self.created_at
        if key == "updated_at":
            return self.updated_at
        return self.data.get(key, default)

    def touch(self, user_id: Optional[str] = None) -> None:
        self.updated_at = utcnow()
        if user_id:
            self.updated_by = user_id

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "tableSlug": self.table_slug,
            "c_name": self.c_name,
            "data": dict(self.data),
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
            "createdBy": self.created_by,
            "updatedBy": self.updated_by,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Record":
        record = cls(
            id=data.get("id") or str(uuid4()),
            table_slug=data.get("tableSlug") or data.get("table_slug") or "",
            c_name=data.get("c_name") or "",
            data=dict(data.get("data") or {}),
            created_by=data.get("createdBy", data.get("created_by")),
            updated_by=data.get("updatedBy", data.get("updated_by")),
        )
        for attr, key in (("created_at", "createdAt"), ("updated_at", "updatedAt")):
            parsed = parse_datetime(data.get(key, data.get(attr)))
            if parsed is not None:
                setattr(record, attr, parsed)
        return record
