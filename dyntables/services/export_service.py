from typing import Any, Dict, Optional

from dyntables.core.enums import SortDirection
from dyntables.core.logging import get_logger, log_execution_time
from dyntables.serializers import get_serializer
from dyntables.services.base import BaseService
from dyntables.services.query_engine import apply_filters, apply_search, apply_sort

logger = get_logger(__name__)


class ExportService(BaseService):
    """Renders the (optionally filtered) records of a table as a file."""

    def get_service_name(self) -> str:
        return "export_service"

    @log_execution_time(logger)
    async def export_records(
        self,
        c_name: str,
        table_slug: str,
        export_format: str = "csv",
        filters: Optional[Dict[str, Any]] = None,
        search: Optional[str] = None,
        sort_field: str = "created_at",
        sort_dir: SortDirection = SortDirection.DESC,
    ) -> Dict[str, Any]:
        """
        Export every matching record, unpaginated.

        Returns:
            ``content`` bytes, ``file_name``, ``media_type`` and ``total``
        """
        serializer = get_serializer(export_format, self.settings.export)
        table = await self.store.get_table(c_name, table_slug)
        records = await self.store.list_records(c_name, table.slug)

        records = apply_filters(records, filters or {}, table)
        records = apply_search(records, search, table)
        records = apply_sort(records, sort_field, sort_dir, table)

        content = serializer.serialize(table, records)
        self.log_operation("export_records", {
            "table_slug": table.slug,
            "format": serializer.format_name,
            "records": len(records),
        })
        return {
            "content": content,
            "file_name": serializer.file_name(table),
            "media_type": serializer.media_type,
            "total": len(records),
        }
