import json
from typing import Any, Dict, List, Optional, Sequence, Union

from dyntables.core.enums import FieldType
from dyntables.core.exceptions import BadRequestError, ConflictError, NotFoundError
from dyntables.core.logging import audit_log
from dyntables.domain.entities.table import Table, TableField
from dyntables.domain.value_objects.field_value import FieldValueError, parse_field_value
from dyntables.serializers import serialize_structure, structure_file_name
from dyntables.services.base import BaseService
from dyntables.utils.validation_utils import is_blank

FieldInput = Union[TableField, Dict[str, Any]]

# Attributes a table update may change
UPDATABLE_ATTRIBUTES = ("name", "icon", "description", "is_active")


def build_fields(fields: Sequence[FieldInput]) -> List[TableField]:
    """Build fields from dicts or TableFields, numbering ``order`` when absent."""
    built = []
    for index, item in enumerate(fields, start=1):
        table_field = item if isinstance(item, TableField) else TableField.from_dict(item)
        if not table_field.order:
            table_field.order = index
        built.append(table_field)
    return built


def convert_value(table_field: TableField, value: Any) -> Any:
    """Stored value converted to the current type of its field, None when it does not convert."""
    if is_blank(value):
        return value
    if isinstance(value, list) and table_field.type != FieldType.FILE:
        value = ", ".join(str(item) for item in value)
    try:
        return parse_field_value(table_field.type, value, choices=table_field.options).to_primitive()
    except FieldValueError:
        return None


class TableService(BaseService):
    """Creation, update and inspection of table definitions."""

    def get_service_name(self) -> str:
        return "table_service"

    async def create_table(
        self,
        c_name: str,
        name: str,
        fields: Sequence[FieldInput],
        slug: Optional[str] = None,
        icon: Optional[str] = None,
        description: Optional[str] = None,
        is_active: bool = True,
        created_by: Optional[str] = None,
    ) -> Table:
        table = Table(
            c_name=c_name,
            name=name,
            slug=slug or "",
            icon=icon,
            description=description,
            is_active=is_active,
            fields=build_fields(fields),
            created_by=created_by,
        )
        if not table.fields:
            raise BadRequestError("A table needs at least one field")

        created = await self.store.insert_table(table)
        self.log_operation("create_table", {"c_name": c_name, "slug": created.slug})
        audit_log("CREATE", "TABLE", tenant=c_name, user_id=created_by, details={"slug": created.slug})
        return created

    async def get_table(self, c_name: str, slug: str) -> Table:
        return await self.store.get_table(c_name, slug)

    async def get_table_by_id(self, c_name: str, table_id: str) -> Table:
        table = await self.store.get_table_by_id(table_id)
        if table.c_name != c_name:
            raise NotFoundError("Table", table_id)
        return table

    async def list_tables(self, c_name: str, include_inactive: bool = False) -> List[Table]:
        return await self.store.list_tables(c_name, include_inactive=include_inactive)

    async def update_table(
        self,
        c_name: str,
        slug: str,
        changes: Dict[str, Any],
        updated_by: Optional[str] = None,
    ) -> Table:
        """
        Update table attributes and fields.

        A slug change is rejected once the table has records. Values of
        fields removed from the definition are dropped from every record,
        values of fields whose type changed are converted to the new type
        and cleared when they do not convert. Inactive tables can be
        updated, which is how they are reactivated.
        """
        table = await self.store.get_table(c_name, slug, include_inactive=True)

        new_slug = changes.get("slug")
        if new_slug and new_slug != table.slug:
            if await self.store.count_records(c_name, table.slug):
                raise ConflictError(
                    "The slug of a table with records cannot change",
                    resource="Table",
                    details={"slug": table.slug},
                )

        for attribute in UPDATABLE_ATTRIBUTES:
            if attribute in changes and changes[attribute] is not None:
                setattr(table, attribute, changes[attribute])

        removed: List[str] = []
        retyped: List[TableField] = []
        if changes.get("fields") is not None:
            new_fields = build_fields(changes["fields"])
            if not new_fields:
                raise BadRequestError("A table needs at least one field")
            kept = {f.name for f in new_fields}
            removed = [name for name in table.field_names if name not in kept]
            previous = {f.name: f.type for f in table.fields}
            retyped = [f for f in new_fields if f.name in previous and previous[f.name] != f.type]
            table.fields = new_fields

        if new_slug and new_slug != table.slug:
            table.slug = new_slug

        table.validate_definition()
        table.touch()

        updated = await self.store.update_table(table)
        if removed or retyped:
            await self._migrate_records(updated, removed, retyped, updated_by)

        self.log_operation("update_table", {
            "c_name": c_name,
            "slug": updated.slug,
            "removed_fields": removed,
            "retyped_fields": [f.name for f in retyped],
        })
        audit_log("UPDATE", "TABLE", tenant=c_name, user_id=updated_by, details={"slug": updated.slug})
        return updated

    async def _migrate_records(
        self,
        table: Table,
        removed: Sequence[str],
        retyped: Sequence[TableField],
        updated_by: Optional[str],
    ) -> int:
        changed = 0
        for record in await self.store.list_records(table.c_name, table.slug):
            data = {k: v for k, v in record.data.items() if k not in removed}
            for table_field in retyped:
                if table_field.name in data:
                    data[table_field.name] = convert_value(table_field, data[table_field.name])
            if data != record.data:
                record.data = data
                record.touch(updated_by)
                await self.store.update_record(record)
                changed += 1
        return changed

    async def delete_table(self, c_name: str, slug: str, deleted_by: Optional[str] = None) -> None:
        table = await self.store.get_table(c_name, slug)
        await self.store.delete_table(c_name, table.id)
        self.log_operation("delete_table", {"c_name": c_name, "slug": slug})
        audit_log("DELETE", "TABLE", tenant=c_name, user_id=deleted_by, details={"slug": slug})

    async def get_structure(self, c_name: str, slug: str) -> Dict[str, Any]:
        table = await self.store.get_table(c_name, slug)
        return {
            "id": table.id,
            "name": table.name,
            "slug": table.slug,
            "fields": [f.to_dict() for f in table.fields],
        }

    async def update_structure(
        self,
        c_name: str,
        slug: str,
        fields: Sequence[FieldInput],
        updated_by: Optional[str] = None,
    ) -> Table:
        return await self.update_table(c_name, slug, {"fields": list(fields)}, updated_by=updated_by)

    async def duplicate_table(
        self,
        c_name: str,
        slug: str,
        new_name: str,
        new_slug: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> Table:
        """Copy a table definition under a new name. Records are not copied."""
        source = await self.store.get_table(c_name, slug)
        copy = await self.create_table(
            c_name=c_name,
            name=new_name,
            slug=new_slug,
            icon=source.icon,
            description=source.description,
            fields=[TableField.from_dict(f.to_dict()) for f in source.fields],
            created_by=created_by,
        )
        self.log_operation("duplicate_table", {"source": slug, "copy": copy.slug})
        return copy

    async def get_stats(self, c_name: str, slug: str, recent_days: Optional[int] = None) -> Dict[str, Any]:
        table = await self.store.get_table(c_name, slug)
        days = recent_days or self.settings.recent_days

        daily = await self.store.daily_record_counts(c_name, table.slug, days)
        return {
            "table_slug": table.slug,
            "total_records": await self.store.count_records(c_name, table.slug),
            "recent_records": await self.store.recent_record_count(c_name, table.slug, days),
            "recent_days": days,
            "daily_stats": [{"date": day.isoformat(), "count": count} for day, count in daily],
        }

    async def export_structure(self, c_name: str, slug: str) -> Dict[str, Any]:
        table = await self.store.get_table(c_name, slug)
        return {
            "content": serialize_structure(table),
            "file_name": structure_file_name(table),
            "media_type": "application/json",
        }

    async def import_structure(
        self,
        c_name: str,
        payload: Union[bytes, str, Dict[str, Any]],
        created_by: Optional[str] = None,
    ) -> Table:
        """Create a table from a structure export."""
        if isinstance(payload, (bytes, str)):
            try:
                payload = json.loads(payload)
            except ValueError as e:
                raise BadRequestError(f"Invalid structure file: {e}")

        definition = payload.get("table", payload) if isinstance(payload, dict) else None
        if not isinstance(definition, dict) or not definition.get("name"):
            raise BadRequestError("Structure must contain a table with a name")

        return await self.create_table(
            c_name=c_name,
            name=definition["name"],
            slug=definition.get("slug"),
            icon=definition.get("icon"),
            description=definition.get("description"),
            is_active=definition.get("isActive", definition.get("is_active", True)),
            fields=definition.get("fields") or [],
            created_by=created_by,
        )
