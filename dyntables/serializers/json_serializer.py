import json
from typing import Any, Dict, Sequence

from dyntables.domain.entities.record import Record
from dyntables.domain.entities.table import Table
from dyntables.serializers.base_serializer import BaseSerializer
from dyntables.utils.date_utils import utcnow


def _dumps(payload: Dict[str, Any]) -> bytes:
    return json.dumps(payload, ensure_ascii=False, indent=2, default=str).encode("utf-8")


class JSONSerializer(BaseSerializer):
    """Lossless export: records keep their raw stored data."""

    format_name = "json"
    extension = "json"
    media_type = "application/json"

    def serialize(self, table: Table, records: Sequence[Record]) -> bytes:
        payload = {
            "table": {
                "name": table.name,
                "slug": table.slug,
                "description": table.description,
                "fields": [f.to_dict() for f in table.fields],
            },
            "records": [r.to_dict() for r in records],
            "exportDate": utcnow().isoformat(),
            "totalRecords": len(records),
        }
        return _dumps(payload)


def serialize_structure(table: Table) -> bytes:
    """Table definition without records, suitable for recreating the table."""
    payload = {
        "table": {
            "name": table.name,
            "slug": table.slug,
            "description": table.description,
            "fields": [f.to_dict() for f in table.fields],
            "isActive": table.is_active,
            "icon": table.icon,
        },
        "exportDate": utcnow().isoformat(),
        "exportType": "table_structure",
    }
    return _dumps(payload)


def structure_file_name(table: Table) -> str:
    return f"{table.slug}-structure-{utcnow().date().isoformat()}.json"
