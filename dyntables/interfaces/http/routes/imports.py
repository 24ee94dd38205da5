"""
API routes for bulk imports.

Imports above ``IMPORT_BACKGROUND_THRESHOLD`` rows are handed to the Celery
worker. The response then carries a task id to poll at ``GET /imports/{task_id}``.
"""

from typing import Any, Dict, List, Optional, Sequence

from celery.result import AsyncResult
from fastapi import APIRouter, Depends, File, Form, Response, UploadFile, status
from fastapi.concurrency import run_in_threadpool

from dyntables.core.config import Settings, get_settings
from dyntables.core.enums import ImportStatus
from dyntables.core.logging import get_logger
from dyntables.core.response import APIResponse
from dyntables.interfaces.dependencies import get_import_service, get_tenant, get_user_id
from dyntables.schemas.import_schemas import (
    CreateTableFromRowsRequest,
    CreateTableImportResponse,
    ImportRecordsRequest,
    ImportReportResponse,
    ImportRowsRequest,
    ImportTaskResponse,
    InferRequest,
)
from dyntables.schemas.table_schemas import FieldResponse, TableResponse
from dyntables.services.import_service import ImportService, records_to_rows
from dyntables.tasks.celery_app import celery_app
from dyntables.tasks.import_tasks import import_records_task

logger = get_logger(__name__)

router = APIRouter(prefix="/imports", tags=["Imports"])

CELERY_STATES = {
    "PENDING": ImportStatus.PENDING,
    "RECEIVED": ImportStatus.PENDING,
    "STARTED": ImportStatus.PROCESSING,
    "RETRY": ImportStatus.PROCESSING,
    "SUCCESS": ImportStatus.COMPLETED,
    "FAILURE": ImportStatus.FAILED,
    "REVOKED": ImportStatus.FAILED,
}


def split_key_fields(key_fields: Optional[str]) -> Optional[List[str]]:
    """Comma separated form value to a list"""
    if not key_fields:
        return None
    return [k.strip() for k in key_fields.split(",") if k.strip()] or None


def task_response(result: AsyncResult) -> ImportTaskResponse:
    state = CELERY_STATES.get(result.state, ImportStatus.PROCESSING)
    response = ImportTaskResponse(task_id=result.id, status=state)
    if state == ImportStatus.COMPLETED:
        response.report = ImportReportResponse.model_validate(result.result)
    elif state == ImportStatus.FAILED:
        response.error = str(result.result)
    return response


async def run_import(
    service: ImportService,
    settings: Settings,
    response: Response,
    c_name: str,
    table_slug: str,
    headers: Sequence[Any],
    rows: List[List[Any]],
    user_id: Optional[str],
    key_fields: Optional[List[str]],
) -> APIResponse:
    """Import inline, or dispatch to the worker when the batch is large."""
    service.check_size(rows)
    if len(rows) <= settings.imports.background_threshold:
        report = await service.import_rows(c_name, table_slug, headers, rows, user_id, key_fields)
        return APIResponse.ok(
            message=f"{report.successful} records imported, {report.failed} failed",
            data=ImportReportResponse.model_validate(report.to_dict()),
        )

    # Fail fast on an unknown table before queueing
    await service.store.get_table(c_name, table_slug)
    result = await run_in_threadpool(
        import_records_task.delay, c_name, table_slug, list(headers), rows, user_id, key_fields
    )
    logger.info(f"Import of {len(rows)} rows into '{table_slug}' dispatched as task {result.id}")

    response.status_code = status.HTTP_202_ACCEPTED
    return APIResponse.ok(message="Import queued", data=task_response(result))


@router.post("/table/{table_slug}/rows", response_model=APIResponse[Any])
async def import_rows(
    table_slug: str,
    payload: ImportRowsRequest,
    response: Response,
    c_name: str = Depends(get_tenant),
    user_id: Optional[str] = Depends(get_user_id),
    settings: Settings = Depends(get_settings),
    service: ImportService = Depends(get_import_service),
):
    """Import a parsed spreadsheet (header row plus data rows) into a table"""
    return await run_import(
        service, settings, response, c_name, table_slug,
        payload.headers, payload.rows, user_id, payload.key_fields,
    )


@router.post("/table/{table_slug}/records", response_model=APIResponse[Any])
async def import_records(
    table_slug: str,
    payload: ImportRecordsRequest,
    response: Response,
    c_name: str = Depends(get_tenant),
    user_id: Optional[str] = Depends(get_user_id),
    settings: Settings = Depends(get_settings),
    service: ImportService = Depends(get_import_service),
):
    """Import records given as objects"""
    headers, rows = records_to_rows(payload.records)
    return await run_import(
        service, settings, response, c_name, table_slug,
        headers, rows, user_id, payload.key_fields,
    )


@router.post("/table/{table_slug}/file", response_model=APIResponse[Any])
async def import_file(
    table_slug: str,
    response: Response,
    file: UploadFile = File(..., description="CSV, XLSX or JSON file"),
    sheet_name: Optional[str] = Form(None),
    key_fields: Optional[str] = Form(None, description="Comma separated dedup key fields"),
    c_name: str = Depends(get_tenant),
    user_id: Optional[str] = Depends(get_user_id),
    settings: Settings = Depends(get_settings),
    service: ImportService = Depends(get_import_service),
):
    """Upload a spreadsheet and import its rows into a table"""
    content = await file.read()
    sheet = await service.read_file(content, file.filename or "", file.content_type, sheet_name)
    return await run_import(
        service, settings, response, c_name, table_slug,
        sheet.headers, sheet.rows, user_id, split_key_fields(key_fields),
    )


@router.post("/create-table", response_model=APIResponse[CreateTableImportResponse],
             status_code=status.HTTP_201_CREATED)
async def create_table_from_rows(
    payload: CreateTableFromRowsRequest,
    c_name: str = Depends(get_tenant),
    user_id: Optional[str] = Depends(get_user_id),
    service: ImportService = Depends(get_import_service),
):
    """Infer fields from the rows, create the table and import the rows into it"""
    table, report = await service.create_table_from_rows(
        c_name,
        payload.name,
        payload.headers,
        payload.rows,
        slug=payload.slug,
        icon=payload.icon,
        description=payload.description,
        created_by=user_id,
        key_fields=payload.key_fields,
    )
    return APIResponse.ok(
        message=f"Table '{table.slug}' created with {report.successful} records",
        data=CreateTableImportResponse(
            table=TableResponse.from_entity(table),
            report=ImportReportResponse.model_validate(report.to_dict()),
        ),
    )


@router.post("/create-table/file", response_model=APIResponse[CreateTableImportResponse],
             status_code=status.HTTP_201_CREATED)
async def create_table_from_file(
    file: UploadFile = File(...),
    name: str = Form(...),
    slug: Optional[str] = Form(None),
    icon: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    sheet_name: Optional[str] = Form(None),
    key_fields: Optional[str] = Form(None),
    c_name: str = Depends(get_tenant),
    user_id: Optional[str] = Depends(get_user_id),
    service: ImportService = Depends(get_import_service),
):
    content = await file.read()
    table, report = await service.create_table_from_file(
        c_name,
        name,
        content,
        file.filename or "",
        content_type=file.content_type,
        sheet_name=sheet_name,
        slug=slug,
        icon=icon,
        description=description,
        created_by=user_id,
        key_fields=split_key_fields(key_fields),
    )
    return APIResponse.ok(
        message=f"Table '{table.slug}' created with {report.successful} records",
        data=CreateTableImportResponse(
            table=TableResponse.from_entity(table),
            report=ImportReportResponse.model_validate(report.to_dict()),
        ),
    )


@router.post("/infer", response_model=APIResponse[List[FieldResponse]])
async def infer_fields(
    payload: InferRequest,
    service: ImportService = Depends(get_import_service),
):
    """Preview the fields a spreadsheet would produce, without creating anything"""
    fields = service.infer_fields(payload.headers, payload.rows)
    return APIResponse.ok(data=[FieldResponse.model_validate(f.to_dict()) for f in fields])


@router.post("/infer/file", response_model=APIResponse[Dict[str, Any]])
async def infer_fields_from_file(
    file: UploadFile = File(...),
    sheet_name: Optional[str] = Form(None),
    service: ImportService = Depends(get_import_service),
):
    content = await file.read()
    sheet = await service.read_file(content, file.filename or "", file.content_type, sheet_name)
    fields = service.infer_fields(sheet.headers, sheet.rows)
    return APIResponse.ok(data={
        "file_name": sheet.file_name,
        "sheet_name": sheet.sheet_name,
        "row_count": sheet.row_count,
        "fields": [f.to_dict() for f in fields],
    })


@router.get("/{task_id}", response_model=APIResponse[ImportTaskResponse])
async def get_import_status(task_id: str):
    """Status of a background import, with its report once finished"""
    result = AsyncResult(task_id, app=celery_app)
    return APIResponse.ok(data=task_response(result))
