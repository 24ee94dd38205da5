from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from dyntables.core.enums import SortDirection
from dyntables.domain.entities.query import QueryResult
from dyntables.domain.entities.record import Record

from .base import BaseSchema


class RecordCreate(BaseSchema):
    table_slug: str = Field(..., min_length=1, alias="tableSlug")
    data: Dict[str, Any] = Field(default_factory=dict)


class RecordUpdate(BaseSchema):
    """Partial update, merged into the stored data before validation."""
    data: Dict[str, Any] = Field(default_factory=dict)


class RecordValidateRequest(BaseSchema):
    table_slug: str = Field(..., min_length=1, alias="tableSlug")
    data: Dict[str, Any] = Field(default_factory=dict)


class RecordResponse(BaseModel):
    id: str
    tableSlug: str
    c_name: str
    data: Dict[str, Any]
    createdAt: str
    updatedAt: str
    createdBy: Optional[str] = None
    updatedBy: Optional[str] = None

    @classmethod
    def from_entity(cls, record: Record) -> "RecordResponse":
        return cls.model_validate(record.to_dict())


class RecordListResponse(BaseModel):
    records: List[RecordResponse]
    total: int
    page: int
    page_size: int
    pages: int
    has_next: bool

    @classmethod
    def from_result(cls, result: QueryResult) -> "RecordListResponse":
        return cls(
            records=[RecordResponse.from_entity(r) for r in result.records],
            total=result.total,
            page=result.page,
            page_size=result.page_size,
            pages=result.pages,
            has_next=result.has_next,
        )


class RecordSearchRequest(BaseSchema):
    search: str = Field(..., min_length=1)
    filters: Dict[str, Any] = Field(default_factory=dict)
    page: int = Field(default=1, ge=1)
    page_size: Optional[int] = Field(default=None, ge=1, alias="pageSize")
    sort_field: str = Field(default="created_at", alias="sortField")
    sort_dir: SortDirection = Field(default=SortDirection.DESC, alias="sortDir")


class BulkUpdateItem(BaseSchema):
    id: str
    data: Dict[str, Any] = Field(default_factory=dict)


class BulkUpdateRequest(BaseSchema):
    updates: List[BulkUpdateItem] = Field(..., min_length=1)


class BulkDeleteRequest(BaseSchema):
    record_ids: List[str] = Field(..., min_length=1, alias="recordIds")


class AddFieldRequest(BaseSchema):
    field_name: str = Field(..., min_length=1, alias="fieldName")
    default_value: Any = Field(default=None, alias="defaultValue")


class DeleteFieldsRequest(BaseSchema):
    field_names: List[str] = Field(..., min_length=1, alias="fieldNames")


class ValidationResponse(BaseModel):
    valid: bool
    errors: List[Dict[str, Any]] = Field(default_factory=list)
