"""
API routes for the records of dynamic tables.
"""

import json
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, status

from dyntables.core.config import Settings, get_settings
from dyntables.core.enums import SortDirection
from dyntables.core.exceptions import BadRequestError
from dyntables.core.response import APIResponse, attachment
from dyntables.domain.entities.query import RecordQuery
from dyntables.interfaces.dependencies import (
    get_export_service,
    get_record_service,
    get_tenant,
    get_user_id,
)
from dyntables.schemas.base import BulkOperationResponse
from dyntables.schemas.record_schemas import (
    AddFieldRequest,
    BulkDeleteRequest,
    BulkUpdateRequest,
    DeleteFieldsRequest,
    RecordCreate,
    RecordListResponse,
    RecordResponse,
    RecordSearchRequest,
    RecordUpdate,
    RecordValidateRequest,
    ValidationResponse,
)
from dyntables.schemas.table_schemas import TableResponse
from dyntables.services.export_service import ExportService
from dyntables.services.record_service import RecordService

router = APIRouter(prefix="/records", tags=["Records"])


def parse_filters(filters: Optional[str]) -> Dict[str, Any]:
    """Filters arrive as a JSON object in the query string"""
    if not filters:
        return {}
    try:
        parsed = json.loads(filters)
    except ValueError as e:
        raise BadRequestError(f"filters is not valid JSON: {e}")
    if not isinstance(parsed, dict):
        raise BadRequestError("filters must be a JSON object")
    return parsed


@router.post("/", response_model=APIResponse[RecordResponse], status_code=status.HTTP_201_CREATED)
async def create_record(
    payload: RecordCreate,
    c_name: str = Depends(get_tenant),
    user_id: Optional[str] = Depends(get_user_id),
    service: RecordService = Depends(get_record_service),
):
    """Validate and store a record. Invalid data returns 422 with every field error."""
    record = await service.create_record(c_name, payload.table_slug, payload.data, created_by=user_id)
    return APIResponse.ok(message="Record created", data=RecordResponse.from_entity(record))


@router.post("/validate", response_model=APIResponse[ValidationResponse])
async def validate_record(
    payload: RecordValidateRequest,
    c_name: str = Depends(get_tenant),
    service: RecordService = Depends(get_record_service),
):
    """Check data against a table without saving it"""
    result = await service.validate_record(c_name, payload.table_slug, payload.data)
    return APIResponse.ok(
        message="Data is valid" if result["valid"] else "Data is not valid",
        data=ValidationResponse.model_validate(result),
    )


@router.get("/table/{table_slug}", response_model=APIResponse[RecordListResponse])
async def list_records(
    table_slug: str,
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1, alias="pageSize"),
    search: Optional[str] = Query(None, description="Free text searched in text-like fields"),
    filters: Optional[str] = Query(None, description='JSON object, e.g. {"estado": "activo"}'),
    sort_field: str = Query("created_at", alias="sortField"),
    sort_dir: SortDirection = Query(SortDirection.DESC, alias="sortDir"),
    c_name: str = Depends(get_tenant),
    settings: Settings = Depends(get_settings),
    service: RecordService = Depends(get_record_service),
):
    record_query = RecordQuery(
        filters=parse_filters(filters),
        search=search,
        page=page,
        page_size=page_size or settings.default_page_size,
        sort_field=sort_field,
        sort_dir=sort_dir,
    )
    result = await service.list_records(c_name, table_slug, record_query)
    return APIResponse.ok(
        message=f"Retrieved {len(result.records)} of {result.total} records",
        data=RecordListResponse.from_result(result),
    )


@router.post("/table/{table_slug}/search", response_model=APIResponse[RecordListResponse])
async def search_records(
    table_slug: str,
    payload: RecordSearchRequest,
    c_name: str = Depends(get_tenant),
    service: RecordService = Depends(get_record_service),
):
    result = await service.search_records(
        c_name,
        table_slug,
        search=payload.search,
        filters=payload.filters,
        page=payload.page,
        page_size=payload.page_size,
        sort_field=payload.sort_field,
        sort_dir=payload.sort_dir,
    )
    return APIResponse.ok(
        message=f"Found {result.total} records",
        data=RecordListResponse.from_result(result),
    )


@router.post("/table/{table_slug}/bulk", response_model=APIResponse[BulkOperationResponse])
async def bulk_update(
    table_slug: str,
    payload: BulkUpdateRequest,
    c_name: str = Depends(get_tenant),
    user_id: Optional[str] = Depends(get_user_id),
    service: RecordService = Depends(get_record_service),
):
    """Partial update of many records. Failures are reported per record."""
    result = await service.bulk_update(
        c_name, table_slug, [u.model_dump() for u in payload.updates], updated_by=user_id
    )
    return APIResponse.ok(
        message=f"{result['successful']} records updated",
        data=BulkOperationResponse.model_validate(result),
    )


@router.post("/table/{table_slug}/bulk-delete", response_model=APIResponse[BulkOperationResponse])
async def bulk_delete(
    table_slug: str,
    payload: BulkDeleteRequest,
    c_name: str = Depends(get_tenant),
    user_id: Optional[str] = Depends(get_user_id),
    service: RecordService = Depends(get_record_service),
):
    result = await service.bulk_delete(c_name, table_slug, payload.record_ids, deleted_by=user_id)
    return APIResponse.ok(
        message=f"{result['deleted']} records deleted",
        data=BulkOperationResponse.model_validate(result),
    )


@router.post("/table/{table_slug}/add-field", response_model=APIResponse[Dict[str, Any]])
async def add_field_to_all_records(
    table_slug: str,
    payload: AddFieldRequest,
    c_name: str = Depends(get_tenant),
    user_id: Optional[str] = Depends(get_user_id),
    service: RecordService = Depends(get_record_service),
):
    """Fill a declared field on every record that has no value for it"""
    result = await service.add_field_to_all_records(
        c_name, table_slug, payload.field_name, payload.default_value, updated_by=user_id
    )
    return APIResponse.ok(message=f"Field added to {result['modified']} records", data=result)


@router.post("/table/{table_slug}/delete-fields", response_model=APIResponse[Dict[str, Any]])
async def delete_fields_from_all_records(
    table_slug: str,
    payload: DeleteFieldsRequest,
    c_name: str = Depends(get_tenant),
    user_id: Optional[str] = Depends(get_user_id),
    service: RecordService = Depends(get_record_service),
):
    result = await service.delete_fields_from_all_records(
        c_name, table_slug, payload.field_names, updated_by=user_id
    )
    return APIResponse.ok(message=f"Fields removed from {result['modified']} records", data=result)


@router.get("/table/{table_slug}/export")
async def export_records(
    table_slug: str,
    export_format: str = Query("csv", alias="format", description="csv, excel or json"),
    search: Optional[str] = Query(None),
    filters: Optional[str] = Query(None),
    sort_field: str = Query("created_at", alias="sortField"),
    sort_dir: SortDirection = Query(SortDirection.DESC, alias="sortDir"),
    c_name: str = Depends(get_tenant),
    service: ExportService = Depends(get_export_service),
):
    """Download every matching record, unpaginated"""
    exported = await service.export_records(
        c_name,
        table_slug,
        export_format=export_format,
        filters=parse_filters(filters),
        search=search,
        sort_field=sort_field,
        sort_dir=sort_dir,
    )
    return attachment(exported["content"], exported["file_name"], exported["media_type"])


@router.get("/{record_id}", response_model=APIResponse[RecordResponse])
async def get_record(
    record_id: str,
    c_name: str = Depends(get_tenant),
    service: RecordService = Depends(get_record_service),
):
    record = await service.get_record(c_name, record_id)
    return APIResponse.ok(data=RecordResponse.from_entity(record))


@router.get("/{record_id}/with-table", response_model=APIResponse[Dict[str, Any]])
async def get_record_with_table(
    record_id: str,
    c_name: str = Depends(get_tenant),
    service: RecordService = Depends(get_record_service),
):
    record, table = await service.get_record_with_table(c_name, record_id)
    return APIResponse.ok(data={
        "record": RecordResponse.from_entity(record).model_dump(),
        "table": TableResponse.from_entity(table).model_dump(mode="json"),
    })


@router.put("/{record_id}", response_model=APIResponse[RecordResponse])
async def update_record(
    record_id: str,
    payload: RecordUpdate,
    c_name: str = Depends(get_tenant),
    user_id: Optional[str] = Depends(get_user_id),
    service: RecordService = Depends(get_record_service),
):
    """Merge the given values into the record. The merged data must stay valid."""
    record = await service.update_record(c_name, record_id, payload.data, updated_by=user_id)
    return APIResponse.ok(message="Record updated", data=RecordResponse.from_entity(record))


@router.patch("/{record_id}/fields", response_model=APIResponse[RecordResponse])
async def delete_fields_from_record(
    record_id: str,
    payload: DeleteFieldsRequest,
    c_name: str = Depends(get_tenant),
    user_id: Optional[str] = Depends(get_user_id),
    service: RecordService = Depends(get_record_service),
):
    record = await service.delete_fields_from_record(c_name, record_id, payload.field_names, updated_by=user_id)
    return APIResponse.ok(message="Fields removed", data=RecordResponse.from_entity(record))


@router.delete("/{record_id}", response_model=APIResponse[None])
async def delete_record(
    record_id: str,
    c_name: str = Depends(get_tenant),
    user_id: Optional[str] = Depends(get_user_id),
    service: RecordService = Depends(get_record_service),
):
    await service.delete_record(c_name, record_id, deleted_by=user_id)
    return APIResponse.ok(message="Record deleted")
