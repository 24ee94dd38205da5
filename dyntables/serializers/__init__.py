from typing import Optional, Sequence

from dyntables.core.config import ExportSettings
from dyntables.core.enums import ExportFormat
from dyntables.core.exceptions import SerializationError
from dyntables.domain.entities.record import Record
from dyntables.domain.entities.table import Table

from .base_serializer import BaseSerializer
from .csv_serializer import CSVSerializer
from .excel_serializer import ExcelSerializer
from .json_serializer import JSONSerializer, serialize_structure, structure_file_name

SERIALIZER_REGISTRY = {
    ExportFormat.CSV.value: CSVSerializer,
    ExportFormat.JSON.value: JSONSerializer,
    ExportFormat.EXCEL.value: ExcelSerializer,
    'xlsx': ExcelSerializer,
}


def get_serializer(export_format: str, export_settings: Optional[ExportSettings] = None) -> BaseSerializer:
    """
    Factory function returning the serializer for an export format

    Raises:
        SerializationError: If the format is not supported
    """
    key = str(getattr(export_format, "value", export_format) or "").lower()
    serializer_class = SERIALIZER_REGISTRY.get(key)
    if not serializer_class:
        raise SerializationError(
            f"Unsupported export format: {export_format}",
            export_format=key,
            details={"supported_formats": [f.value for f in ExportFormat]},
        )
    return serializer_class(export_settings)


def serialize(table: Table, records: Sequence[Record], export_format: str) -> bytes:
    return get_serializer(export_format).serialize(table, records)


__all__ = [
    "BaseSerializer",
    "CSVSerializer",
    "ExcelSerializer",
    "JSONSerializer",
    "SERIALIZER_REGISTRY",
    "get_serializer",
    "serialize",
    "serialize_structure",
    "structure_file_name",
]
