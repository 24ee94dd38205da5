from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from dyntables.core.enums import ImportStatus

from .base import BaseSchema
from .table_schemas import FieldResponse, TableResponse


class ImportRowsRequest(BaseSchema):
    """A spreadsheet already parsed by the client: header row plus data rows."""
    headers: List[Any] = Field(..., min_length=1)
    rows: List[List[Any]] = Field(default_factory=list)
    key_fields: Optional[List[str]] = Field(default=None, alias="keyFields")


class ImportRecordsRequest(BaseSchema):
    """Records as objects, either ``{...}`` or ``{"data": {...}}``."""
    records: List[Dict[str, Any]] = Field(..., min_length=1)
    key_fields: Optional[List[str]] = Field(default=None, alias="keyFields")


class CreateTableFromRowsRequest(BaseSchema):
    name: str = Field(..., min_length=1, max_length=255)
    slug: Optional[str] = None
    icon: Optional[str] = None
    description: Optional[str] = None
    headers: List[Any] = Field(..., min_length=1)
    rows: List[List[Any]] = Field(default_factory=list)
    key_fields: Optional[List[str]] = Field(default=None, alias="keyFields")


class InferRequest(BaseSchema):
    headers: List[Any] = Field(..., min_length=1)
    rows: List[List[Any]] = Field(default_factory=list)


class ImportRowErrorResponse(BaseModel):
    row_index: int
    reason: str
    field_errors: List[Dict[str, Any]] = Field(default_factory=list)


class DuplicateFieldCount(BaseModel):
    field_name: str
    count: int


class ImportReportResponse(BaseModel):
    table_slug: Optional[str] = None
    total: int
    successful: int
    failed: int
    errors: List[ImportRowErrorResponse] = Field(default_factory=list)
    duplicates_removed: int = 0
    duplicate_fields: List[DuplicateFieldCount] = Field(default_factory=list)
    original_count: int = 0
    final_count: int = 0
    fields: List[FieldResponse] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


class CreateTableImportResponse(BaseModel):
    table: TableResponse
    report: ImportReportResponse


class ImportTaskResponse(BaseModel):
    task_id: str
    status: ImportStatus
    report: Optional[ImportReportResponse] = None
    error: Optional[str] = None
