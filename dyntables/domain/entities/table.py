from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import uuid4

from dyntables.core.enums import FieldType
from dyntables.core.exceptions import SchemaDefinitionError
from dyntables.utils.date_utils import parse_datetime, utcnow
from dyntables.utils.text_utils import field_name, table_slug
from dyntables.utils.validation_utils import is_slug


@dataclass
class TableField:
    """One typed column of a dynamic table."""

    name: str
    label: str
    type: FieldType = FieldType.TEXT
    required: bool = False
    options: List[str] = field(default_factory=list)
    order: int = 0
    width: Optional[int] = None
    default_value: Any = None

    def __post_init__(self):
        self.type = FieldType(self.type)
        if not self.label:
            self.label = self.name
        if not self.name:
            self.name = field_name(self.label)
        if not self.name:
            raise SchemaDefinitionError(
                "Field name cannot be derived from an empty label",
                details={"label": self.label},
            )
        if self.type != FieldType.SELECT:
            self.options = []

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "label": self.label,
            "type": self.type.value,
            "required": self.required,
            "options": list(self.options),
            "order": self.order,
            "width": self.width,
            "default_value": self.default_value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TableField":
        return cls(
            name=data.get("name") or "",
            label=data.get("label") or "",
            type=data.get("type") or FieldType.TEXT,
            required=bool(data.get("required", False)),
            options=list(data.get("options") or []),
            order=int(data.get("order") or 0),
            width=data.get("width"),
            default_value=data.get("default_value", data.get("defaultValue")),
        )


@dataclass
class Table:
    """
    A tenant-scoped schema. Records of the table are stored separately and
    reference it through ``slug``.
    """

    c_name: str
    name: str
    slug: str = ""
    fields: List[TableField] = field(default_factory=list)
    description: Optional[str] = None
    icon: Optional[str] = None
    is_active: bool = True
    created_by: Optional[str] = None
    id: str = field(default_factory=lambda: str(uuid4()))
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def __post_init__(self):
        if not self.slug:
            self.slug = table_slug(self.name)
        self.validate_definition()

    def validate_definition(self) -> None:
        if not is_slug(self.slug):
            raise SchemaDefinitionError(
                f"Slug '{self.slug}' is not URL-safe",
                details={"slug": self.slug},
            )
        self.ensure_unique_field_names()

    def ensure_unique_field_names(self) -> None:
        duplicates = [name for name, count in Counter(f.name for f in self.fields).items() if count > 1]
        if duplicates:
            raise SchemaDefinitionError(
                "Field names must be unique within a table",
                details={"duplicate_fields": sorted(duplicates)},
            )

    @property
    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]

    def get_field(self, name: str) -> Optional[TableField]:
        for table_field in self.fields:
            if table_field.name == name:
                return table_field
        return None

    def ordered_fields(self) -> List[TableField]:
        return sorted(self.fields, key=lambda f: f.order)

    def touch(self) -> None:
        self.updated_at = utcnow()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "c_name": self.c_name,
            "slug": self.slug,
            "name": self.name,
            "icon": self.icon,
            "description": self.description,
            "is_active": self.is_active,
            "fields": [f.to_dict() for f in self.fields],
            "created_by": self.created_by,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Table":
        table = cls(
            id=data.get("id") or str(uuid4()),
            c_name=data["c_name"],
            slug=data.get("slug") or "",
            name=data["name"],
            icon=data.get("icon"),
            description=data.get("description"),
            is_active=data.get("is_active", True),
            fields=[TableField.from_dict(f) for f in data.get("fields") or []],
            created_by=data.get("created_by"),
        )
        for attr in ("created_at", "updated_at"):
            parsed = parse_datetime(data.get(attr))
            if parsed is not None:
                setattr(table, attr, parsed)
        return table
