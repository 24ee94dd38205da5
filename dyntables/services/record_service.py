from typing import Any, Dict, List, Optional, Sequence, Tuple

from dyntables.core.enums import FieldErrorReason, SortDirection
from dyntables.core.exceptions import AppException, NotFoundError, RecordValidationError
from dyntables.core.logging import audit_log
from dyntables.domain.entities.query import QueryResult, RecordQuery
from dyntables.domain.entities.record import Record
from dyntables.domain.entities.table import Table
from dyntables.domain.value_objects.errors import FieldError
from dyntables.domain.value_objects.field_value import FieldValueError, parse_field_value
from dyntables.services.base import BaseService
from dyntables.transformers.record_validator import RecordValidator, apply_defaults


class RecordService(BaseService):
    """
    Record writes always go through the validator: the full merged data of
    a record is checked against its table before anything is stored.
    """

    def __init__(self, store, settings=None, validator: Optional[RecordValidator] = None):
        super().__init__(store, settings)
        self.validator = validator or RecordValidator(
            strict_select=self.settings.validation.strict_select,
            strict_email=self.settings.validation.strict_email,
        )

    def get_service_name(self) -> str:
        return "record_service"

    def _checked_data(self, table: Table, data: Dict[str, Any]) -> Dict[str, Any]:
        outcome = self.validator.validate_and_coerce(table, data)
        if not outcome.is_valid:
            raise RecordValidationError(outcome.errors, details={"table_slug": table.slug})
        return outcome.data

    async def create_record(
        self,
        c_name: str,
        table_slug: str,
        data: Dict[str, Any],
        created_by: Optional[str] = None,
    ) -> Record:
        table = await self.store.get_table(c_name, table_slug)
        record = Record(
            table_slug=table.slug,
            c_name=c_name,
            data=self._checked_data(table, apply_defaults(table, data)),
            created_by=created_by,
            updated_by=created_by,
        )
        created = await self.store.insert_record(record)
        audit_log("CREATE", "RECORD", tenant=c_name, user_id=created_by,
                  details={"table_slug": table.slug, "record_id": created.id})
        return created

    async def get_record(self, c_name: str, record_id: str) -> Record:
        return await self.store.get_record(c_name, record_id)

    async def get_record_with_table(self, c_name: str, record_id: str) -> Tuple[Record, Table]:
        record = await self.store.get_record(c_name, record_id)
        table = await self.store.get_table(c_name, record.table_slug)
        return record, table

    async def update_record(
        self,
        c_name: str,
        record_id: str,
        data: Dict[str, Any],
        updated_by: Optional[str] = None,
    ) -> Record:
        """Merge ``data`` into the record and re-validate the merged result."""
        record, table = await self.get_record_with_table(c_name, record_id)
        record.data = self._checked_data(table, {**record.data, **data})
        record.touch(updated_by)

        updated = await self.store.update_record(record)
        audit_log("UPDATE", "RECORD", tenant=c_name, user_id=updated_by,
                  details={"table_slug": table.slug, "record_id": record_id, "fields": sorted(data)})
        return updated

    async def delete_record(self, c_name: str, record_id: str, deleted_by: Optional[str] = None) -> None:
        await self.store.delete_record(c_name, record_id)
        audit_log("DELETE", "RECORD", tenant=c_name, user_id=deleted_by, details={"record_id": record_id})

    async def validate_record(self, c_name: str, table_slug: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """Check data against the table without storing anything."""
        table = await self.store.get_table(c_name, table_slug)
        errors = self.validator.validate(table, apply_defaults(table, data))
        return {"valid": not errors, "errors": [e.to_dict() for e in errors]}

    async def list_records(self, c_name: str, table_slug: str, record_query: RecordQuery) -> QueryResult:
        return await self.store.query_records(c_name, table_slug, record_query)

    async def search_records(
        self,
        c_name: str,
        table_slug: str,
        search: str,
        filters: Optional[Dict[str, Any]] = None,
        page: int = 1,
        page_size: Optional[int] = None,
        sort_field: str = "created_at",
        sort_dir: SortDirection = SortDirection.DESC,
    ) -> QueryResult:
        record_query = RecordQuery(
            filters=filters or {},
            search=search,
            page=page,
            page_size=page_size or self.settings.default_page_size,
            sort_field=sort_field,
            sort_dir=sort_dir,
        )
        return await self.store.query_records(c_name, table_slug, record_query)

    async def bulk_update(
        self,
        c_name: str,
        table_slug: str,
        updates: Sequence[Dict[str, Any]],
        updated_by: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Apply ``[{"id": ..., "data": {...}}]`` partial updates one by one.
        A failing update is reported and does not stop the others.
        """
        table = await self.store.get_table(c_name, table_slug)
        successful, errors = 0, []

        for update in updates:
            record_id = update.get("id")
            try:
                record = await self.store.get_record(c_name, record_id)
                if record.table_slug != table.slug:
                    raise NotFoundError("Record", record_id)
                record.data = self._checked_data(table, {**record.data, **(update.get("data") or {})})
                record.touch(updated_by)
                await self.store.update_record(record)
                successful += 1
            except AppException as e:
                errors.append({"id": record_id, "error": e.to_dict()})

        self.log_operation("bulk_update", {"table_slug": table.slug, "successful": successful, "failed": len(errors)})
        return {"successful": successful, "failed": len(errors), "errors": errors}

    async def bulk_delete(
        self,
        c_name: str,
        table_slug: str,
        record_ids: Sequence[str],
        deleted_by: Optional[str] = None,
    ) -> Dict[str, Any]:
        table = await self.store.get_table(c_name, table_slug)
        deleted, errors = 0, []

        for record_id in record_ids:
            try:
                record = await self.store.get_record(c_name, record_id)
                if record.table_slug != table.slug:
                    raise NotFoundError("Record", record_id)
                await self.store.delete_record(c_name, record_id)
                deleted += 1
            except AppException as e:
                errors.append({"id": record_id, "error": e.to_dict()})

        audit_log("BULK_DELETE", "RECORD", tenant=c_name, user_id=deleted_by,
                  details={"table_slug": table.slug, "deleted": deleted})
        return {"deleted": deleted, "failed": len(errors), "errors": errors}

    async def add_field_to_all_records(
        self,
        c_name: str,
        table_slug: str,
        field_name: str,
        default_value: Any,
        updated_by: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Set ``default_value`` on every record that has no value for the field."""
        table = await self.store.get_table(c_name, table_slug)
        table_field = table.get_field(field_name)
        if table_field is None:
            raise RecordValidationError([FieldError(
                field=field_name,
                reason=FieldErrorReason.UNKNOWN_FIELD,
                message=f"'{field_name}' is not a field of table '{table.slug}'",
            )])

        try:
            value = parse_field_value(
                table_field.type,
                default_value,
                choices=table_field.options,
                strict_select=self.validator.strict_select,
                strict_email=self.validator.strict_email,
            ).to_primitive()
        except FieldValueError as e:
            raise RecordValidationError([FieldError(field=field_name, reason=e.reason, message=e.message)])

        modified = 0
        for record in await self.store.list_records(c_name, table.slug):
            if record.data.get(field_name) is None:
                record.data[field_name] = value
                record.touch(updated_by)
                await self.store.update_record(record)
                modified += 1

        self.log_operation("add_field_to_all_records", {"table_slug": table.slug, "field": field_name, "modified": modified})
        return {"field_name": field_name, "modified": modified}

    def _ensure_removable(self, table: Table, field_names: Sequence[str]) -> None:
        errors = []
        for name in field_names:
            table_field = table.get_field(name)
            if table_field is not None and table_field.required:
                errors.append(FieldError(
                    field=name,
                    reason=FieldErrorReason.MISSING_REQUIRED,
                    message=f"'{table_field.label}' is required and cannot be removed",
                ))
        if errors:
            raise RecordValidationError(errors, message="Required fields cannot be removed")

    async def delete_fields_from_all_records(
        self,
        c_name: str,
        table_slug: str,
        field_names: List[str],
        updated_by: Optional[str] = None,
    ) -> Dict[str, Any]:
        table = await self.store.get_table(c_name, table_slug)
        self._ensure_removable(table, field_names)

        modified = 0
        for record in await self.store.list_records(c_name, table.slug):
            if any(name in record.data for name in field_names):
                for name in field_names:
                    record.data.pop(name, None)
                record.touch(updated_by)
                await self.store.update_record(record)
                modified += 1

        self.log_operation("delete_fields_from_all_records", {"table_slug": table.slug, "fields": field_names})
        return {"field_names": list(field_names), "modified": modified}

    async def delete_fields_from_record(
        self,
        c_name: str,
        record_id: str,
        field_names: List[str],
        updated_by: Optional[str] = None,
    ) -> Record:
        record, table = await self.get_record_with_table(c_name, record_id)
        self._ensure_removable(table, field_names)

        for name in field_names:
            record.data.pop(name, None)
        record.data = self._checked_data(table, record.data)
        record.touch(updated_by)
        return await self.store.update_record(record)
