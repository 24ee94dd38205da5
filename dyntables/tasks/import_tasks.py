# ==============================================
# dyntables/tasks/import_tasks.py
# ==============================================
import asyncio
from typing import Any, Dict, List, Optional

from dyntables.core.exceptions import AppException
from dyntables.core.logging import get_logger
from dyntables.infrastructure.db.repositories.factory import get_default_store
from dyntables.services.import_service import ImportService

from .celery_app import celery_app

logger = get_logger(__name__)


@celery_app.task(
    bind=True,
    name="dyntables.tasks.import_tasks.import_records_task",
    time_limit=3600,
    soft_time_limit=3000,
)
def import_records_task(
    self,
    c_name: str,
    table_slug: str,
    headers: List[Any],
    rows: List[List[Any]],
    created_by: Optional[str] = None,
    key_fields: Optional[List[str]] = None,
) -> Dict[str, Any]:
    """
    Import a large batch of rows outside the request cycle

    Args:
        c_name: Tenant the table belongs to
        table_slug: Target table
        headers: Header row of the spreadsheet
        rows: Data rows, positional like ``headers``
        created_by: User recorded on every imported record
        key_fields: Fields used for duplicate detection

    Returns:
        The import report as a dict
    """
    task_id = self.request.id
    logger.info(f"Starting import task {task_id} into '{table_slug}' ({len(rows)} rows)")

    service = ImportService(get_default_store())
    try:
        report = asyncio.run(service.import_rows(
            c_name=c_name,
            table_slug=table_slug,
            headers=headers,
            rows=rows,
            created_by=created_by,
            key_fields=key_fields,
        ))
    except AppException as e:
        logger.error(f"Import task {task_id} failed: {e.message}")
        raise

    logger.info(
        f"Import task {task_id} finished: {report.successful} stored, "
        f"{report.failed} failed, {report.duplicates_removed} duplicates removed"
    )
    return report.to_dict()
