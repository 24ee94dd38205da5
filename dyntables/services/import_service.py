from typing import Any, Dict, List, Optional, Sequence, Tuple

from dyntables.core.exceptions import AppException, ImportProcessingException
from dyntables.core.logging import audit_log, get_logger, log_execution_time
from dyntables.domain.entities.import_batch import ImportReport
from dyntables.domain.entities.record import Record
from dyntables.domain.entities.table import Table, TableField
from dyntables.domain.value_objects.errors import ImportRowError
from dyntables.processors import ParsedSheet, processor_for_file
from dyntables.services.base import BaseService
from dyntables.services.table_service import TableService
from dyntables.transformers.pipeline import ImportPipeline
from dyntables.transformers.record_validator import RecordValidator
from dyntables.transformers.type_inference import infer_schema

logger = get_logger(__name__)


def records_to_rows(records: Sequence[Dict[str, Any]]) -> Tuple[List[str], List[List[Any]]]:
    """Turn ``[{...}]`` or ``[{"data": {...}}]`` into a header and positional rows."""
    objects = [r["data"] if isinstance(r.get("data"), dict) else r for r in records]

    headers: List[str] = []
    for obj in objects:
        for key in obj:
            if key not in headers:
                headers.append(key)

    return headers, [[obj.get(h) for h in headers] for obj in objects]


class ImportService(BaseService):
    """
    Bulk import of spreadsheet rows: header normalization, type inference,
    deduplication, coercion and validation, then one insert per record.
    """

    def get_service_name(self) -> str:
        return "import_service"

    def _pipeline(self, key_fields: Optional[Sequence[str]] = None) -> ImportPipeline:
        return ImportPipeline(
            key_fields=key_fields or self.settings.imports.dedup_key_fields,
            sample_rows=self.settings.imports.sample_rows,
            validator=RecordValidator(
                strict_select=self.settings.validation.strict_select,
                strict_email=self.settings.validation.strict_email,
            ),
        )

    def check_size(self, rows: Sequence[Any]) -> None:
        if len(rows) > self.settings.imports.max_rows:
            raise ImportProcessingException(
                f"Import has {len(rows)} rows, the limit is {self.settings.imports.max_rows}",
                details={"rows": len(rows), "max_rows": self.settings.imports.max_rows},
            )

    async def read_file(
        self,
        content: bytes,
        file_name: str,
        content_type: Optional[str] = None,
        sheet_name: Optional[str] = None,
    ) -> ParsedSheet:
        processor = processor_for_file(
            file_name,
            content_type,
            max_rows=self.settings.imports.max_rows,
            sheet_name=sheet_name,
        )
        return await processor.read(content, file_name)

    def infer_fields(self, headers: Sequence[Any], rows: Sequence[Sequence[Any]]) -> List[TableField]:
        """Preview the fields a spreadsheet would produce."""
        return infer_schema(headers, rows, self.settings.imports.sample_rows)

    @log_execution_time(logger)
    async def import_rows(
        self,
        c_name: str,
        table_slug: str,
        headers: Sequence[Any],
        rows: Sequence[Sequence[Any]],
        created_by: Optional[str] = None,
        key_fields: Optional[Sequence[str]] = None,
    ) -> ImportReport:
        """
        Import positional rows into an existing table.

        Rows failing validation or storage are listed in the report and
        do not stop the batch. Nothing is rolled back.
        """
        self.check_size(rows)
        table = await self.store.get_table(c_name, table_slug)

        report, valid = self._pipeline(key_fields).run(table, headers, rows)

        for row_number, data in valid:
            record = Record(
                table_slug=table.slug,
                c_name=c_name,
                data=data,
                created_by=created_by,
                updated_by=created_by,
            )
            try:
                await self.store.insert_record(record)
                report.successful += 1
            except AppException as e:
                self.logger.warning(f"Row {row_number} of import into '{table.slug}' not stored: {e.message}")
                report.failed += 1
                report.errors.append(ImportRowError(row_index=row_number, reason=e.error_code))

        report.errors.sort(key=lambda e: e.row_index)
        self.log_operation("import_rows", {
            "table_slug": table.slug,
            "successful": report.successful,
            "failed": report.failed,
            "duplicates_removed": report.duplicates_removed,
        })
        audit_log("IMPORT", "RECORD", tenant=c_name, user_id=created_by,
                  details={"table_slug": table.slug, "successful": report.successful, "failed": report.failed})
        return report

    async def import_records(
        self,
        c_name: str,
        table_slug: str,
        records: Sequence[Dict[str, Any]],
        created_by: Optional[str] = None,
        key_fields: Optional[Sequence[str]] = None,
    ) -> ImportReport:
        headers, rows = records_to_rows(records)
        return await self.import_rows(c_name, table_slug, headers, rows, created_by, key_fields)

    async def import_file(
        self,
        c_name: str,
        table_slug: str,
        content: bytes,
        file_name: str,
        content_type: Optional[str] = None,
        sheet_name: Optional[str] = None,
        created_by: Optional[str] = None,
        key_fields: Optional[Sequence[str]] = None,
    ) -> ImportReport:
        sheet = await self.read_file(content, file_name, content_type, sheet_name)
        return await self.import_rows(c_name, table_slug, sheet.headers, sheet.rows, created_by, key_fields)

    async def create_table_from_rows(
        self,
        c_name: str,
        name: str,
        headers: Sequence[Any],
        rows: Sequence[Sequence[Any]],
        slug: Optional[str] = None,
        icon: Optional[str] = None,
        description: Optional[str] = None,
        created_by: Optional[str] = None,
        key_fields: Optional[Sequence[str]] = None,
    ) -> Tuple[Table, ImportReport]:
        """Infer fields, create the table and import the rows into it."""
        self.check_size(rows)
        fields = self.infer_fields(headers, rows)
        if not fields:
            raise ImportProcessingException("Spreadsheet has no columns")

        table = await TableService(self.store, self.settings).create_table(
            c_name=c_name,
            name=name,
            slug=slug,
            icon=icon,
            description=description,
            fields=fields,
            created_by=created_by,
        )
        report = await self.import_rows(c_name, table.slug, headers, rows, created_by, key_fields)
        return table, report

    async def create_table_from_file(
        self,
        c_name: str,
        name: str,
        content: bytes,
        file_name: str,
        content_type: Optional[str] = None,
        sheet_name: Optional[str] = None,
        **kwargs: Any,
    ) -> Tuple[Table, ImportReport]:
        sheet = await self.read_file(content, file_name, content_type, sheet_name)
        return await self.create_table_from_rows(c_name, name, sheet.headers, sheet.rows, **kwargs)
