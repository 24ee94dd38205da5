from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from dyntables.core.enums import FieldType
from dyntables.domain.entities.table import Table

from .base import BaseSchema


class FieldSchema(BaseSchema):
    """A field as sent by the client. ``name`` is derived from ``label`` when omitted."""
    name: Optional[str] = None
    label: str = Field(..., min_length=1)
    type: FieldType = FieldType.TEXT
    required: bool = False
    options: List[str] = Field(default_factory=list)
    order: int = 0
    width: Optional[int] = None
    default_value: Any = Field(default=None, alias="defaultValue")


class TableCreate(BaseSchema):
    name: str = Field(..., min_length=1, max_length=255)
    slug: Optional[str] = None
    icon: Optional[str] = None
    description: Optional[str] = None
    is_active: bool = Field(default=True, alias="isActive")
    fields: List[FieldSchema] = Field(..., min_length=1)


class TableUpdate(BaseSchema):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    slug: Optional[str] = None
    icon: Optional[str] = None
    description: Optional[str] = None
    is_active: Optional[bool] = Field(default=None, alias="isActive")
    fields: Optional[List[FieldSchema]] = None


class StructureUpdate(BaseSchema):
    fields: List[FieldSchema] = Field(..., min_length=1)


class DuplicateTableRequest(BaseSchema):
    new_name: str = Field(..., min_length=1, alias="newName")
    new_slug: Optional[str] = Field(default=None, alias="newSlug")


class FieldResponse(BaseModel):
    name: str
    label: str
    type: FieldType
    required: bool
    options: List[str] = Field(default_factory=list)
    order: int
    width: Optional[int] = None
    default_value: Any = None


class TableResponse(BaseModel):
    id: str
    c_name: str
    slug: str
    name: str
    icon: Optional[str] = None
    description: Optional[str] = None
    is_active: bool
    fields: List[FieldResponse]
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, table: Table) -> "TableResponse":
        return cls.model_validate(table.to_dict())


class TableStructureResponse(BaseModel):
    id: str
    name: str
    slug: str
    fields: List[FieldResponse]


class DailyCount(BaseModel):
    date: str
    count: int


class TableStatsResponse(BaseModel):
    table_slug: str
    total_records: int
    recent_records: int
    recent_days: int
    daily_stats: List[DailyCount]


def fields_payload(fields: List[FieldSchema]) -> List[Dict[str, Any]]:
    """Field schemas as the dicts the table service builds fields from."""
    return [f.model_dump() for f in fields]
