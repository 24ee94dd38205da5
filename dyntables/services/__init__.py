from .base import BaseService
from .table_service import TableService
from .record_service import RecordService
from .import_service import ImportService
from .export_service import ExportService

__all__ = [
    "BaseService",
    "TableService",
    "RecordService",
    "ImportService",
    "ExportService",
]
