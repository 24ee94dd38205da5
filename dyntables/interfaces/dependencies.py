from typing import Optional

from fastapi import Depends, Header

from dyntables.core.config import Settings, get_settings
from dyntables.core.exceptions import BadRequestError
from dyntables.domain.repositories.record_store import RecordStore
from dyntables.infrastructure.db.repositories.factory import get_default_store
from dyntables.services import ExportService, ImportService, RecordService, TableService


def get_store() -> RecordStore:
    """Store dependency"""
    return get_default_store()


async def get_tenant(x_company: Optional[str] = Header(None, alias="X-Company")) -> str:
    """Tenant (company) every request is scoped to"""
    if not x_company or not x_company.strip():
        raise BadRequestError("X-Company header is required")
    return x_company.strip()


async def get_user_id(x_user_id: Optional[str] = Header(None, alias="X-User-Id")) -> Optional[str]:
    """Acting user, recorded as created_by / updated_by"""
    return x_user_id.strip() if x_user_id and x_user_id.strip() else None


def get_table_service(
    store: RecordStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> TableService:
    return TableService(store, settings)


def get_record_service(
    store: RecordStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> RecordService:
    return RecordService(store, settings)


def get_import_service(
    store: RecordStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> ImportService:
    return ImportService(store, settings)


def get_export_service(
    store: RecordStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> ExportService:
    return ExportService(store, settings)
