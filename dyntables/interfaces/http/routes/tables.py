"""
API routes for table definitions.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Query, status

from dyntables.core.response import APIResponse, attachment
from dyntables.interfaces.dependencies import get_table_service, get_tenant, get_user_id
from dyntables.schemas.table_schemas import (
    DuplicateTableRequest,
    StructureUpdate,
    TableCreate,
    TableResponse,
    TableStatsResponse,
    TableStructureResponse,
    TableUpdate,
    fields_payload,
)
from dyntables.services.table_service import TableService

router = APIRouter(prefix="/tables", tags=["Tables"])


@router.post("/", response_model=APIResponse[TableResponse], status_code=status.HTTP_201_CREATED)
async def create_table(
    payload: TableCreate,
    c_name: str = Depends(get_tenant),
    user_id: Optional[str] = Depends(get_user_id),
    service: TableService = Depends(get_table_service),
):
    """Create a table from its field definitions"""
    table = await service.create_table(
        c_name=c_name,
        name=payload.name,
        slug=payload.slug,
        icon=payload.icon,
        description=payload.description,
        is_active=payload.is_active,
        fields=fields_payload(payload.fields),
        created_by=user_id,
    )
    return APIResponse.ok(message="Table created", data=TableResponse.from_entity(table))


@router.get("/", response_model=APIResponse[List[TableResponse]])
async def list_tables(
    include_inactive: bool = Query(False, description="Include soft-deleted tables"),
    c_name: str = Depends(get_tenant),
    service: TableService = Depends(get_table_service),
):
    tables = await service.list_tables(c_name, include_inactive=include_inactive)
    return APIResponse.ok(
        message=f"Retrieved {len(tables)} tables",
        data=[TableResponse.from_entity(t) for t in tables],
    )


@router.post("/import", response_model=APIResponse[TableResponse], status_code=status.HTTP_201_CREATED)
async def import_structure(
    payload: Dict[str, Any] = Body(..., description="A structure export, or a bare table definition"),
    c_name: str = Depends(get_tenant),
    user_id: Optional[str] = Depends(get_user_id),
    service: TableService = Depends(get_table_service),
):
    """Create a table from an exported structure"""
    table = await service.import_structure(c_name, payload, created_by=user_id)
    return APIResponse.ok(message="Table structure imported", data=TableResponse.from_entity(table))


@router.get("/id/{table_id}", response_model=APIResponse[TableResponse])
async def get_table_by_id(
    table_id: str,
    c_name: str = Depends(get_tenant),
    service: TableService = Depends(get_table_service),
):
    table = await service.get_table_by_id(c_name, table_id)
    return APIResponse.ok(data=TableResponse.from_entity(table))


@router.get("/{slug}", response_model=APIResponse[TableResponse])
async def get_table(
    slug: str,
    c_name: str = Depends(get_tenant),
    service: TableService = Depends(get_table_service),
):
    table = await service.get_table(c_name, slug)
    return APIResponse.ok(data=TableResponse.from_entity(table))


@router.put("/{slug}", response_model=APIResponse[TableResponse])
async def update_table(
    slug: str,
    payload: TableUpdate,
    c_name: str = Depends(get_tenant),
    user_id: Optional[str] = Depends(get_user_id),
    service: TableService = Depends(get_table_service),
):
    """
    Update name, slug, icon, description, active flag or fields.

    The slug of a table that already has records cannot change.
    """
    changes = payload.model_dump(exclude_unset=True, exclude={"fields"})
    if payload.fields is not None:
        changes["fields"] = fields_payload(payload.fields)

    table = await service.update_table(c_name, slug, changes, updated_by=user_id)
    return APIResponse.ok(message="Table updated", data=TableResponse.from_entity(table))


@router.delete("/{slug}", response_model=APIResponse[None])
async def delete_table(
    slug: str,
    c_name: str = Depends(get_tenant),
    user_id: Optional[str] = Depends(get_user_id),
    service: TableService = Depends(get_table_service),
):
    await service.delete_table(c_name, slug, deleted_by=user_id)
    return APIResponse.ok(message="Table deleted")


@router.get("/{slug}/structure", response_model=APIResponse[TableStructureResponse])
async def get_structure(
    slug: str,
    c_name: str = Depends(get_tenant),
    service: TableService = Depends(get_table_service),
):
    structure = await service.get_structure(c_name, slug)
    return APIResponse.ok(data=TableStructureResponse.model_validate(structure))


@router.patch("/{slug}/structure", response_model=APIResponse[TableResponse])
async def update_structure(
    slug: str,
    payload: StructureUpdate,
    c_name: str = Depends(get_tenant),
    user_id: Optional[str] = Depends(get_user_id),
    service: TableService = Depends(get_table_service),
):
    """Replace the field list. Values of removed fields are dropped from every record."""
    table = await service.update_structure(c_name, slug, fields_payload(payload.fields), updated_by=user_id)
    return APIResponse.ok(message="Table structure updated", data=TableResponse.from_entity(table))


@router.post("/{slug}/duplicate", response_model=APIResponse[TableResponse], status_code=status.HTTP_201_CREATED)
async def duplicate_table(
    slug: str,
    payload: DuplicateTableRequest,
    c_name: str = Depends(get_tenant),
    user_id: Optional[str] = Depends(get_user_id),
    service: TableService = Depends(get_table_service),
):
    table = await service.duplicate_table(
        c_name, slug, new_name=payload.new_name, new_slug=payload.new_slug, created_by=user_id
    )
    return APIResponse.ok(message="Table duplicated", data=TableResponse.from_entity(table))


@router.get("/{slug}/stats", response_model=APIResponse[TableStatsResponse])
async def get_stats(
    slug: str,
    recent_days: Optional[int] = Query(None, ge=1, le=365, description="Window for recent records"),
    c_name: str = Depends(get_tenant),
    service: TableService = Depends(get_table_service),
):
    stats = await service.get_stats(c_name, slug, recent_days=recent_days)
    return APIResponse.ok(data=TableStatsResponse.model_validate(stats))


@router.get("/{slug}/export")
async def export_structure(
    slug: str,
    c_name: str = Depends(get_tenant),
    service: TableService = Depends(get_table_service),
):
    """Download the table definition as JSON"""
    exported = await service.export_structure(c_name, slug)
    return attachment(exported["content"], exported["file_name"], exported["media_type"])
