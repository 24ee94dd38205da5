# ==============================================
# dyntables/serializers/base_serializer.py
# ==============================================
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from dyntables.core.config import ExportSettings, get_settings
from dyntables.core.logging import get_logger
from dyntables.domain.entities.record import Record
from dyntables.domain.entities.table import Table, TableField
from dyntables.utils.date_utils import utcnow

logger = get_logger(__name__)


class BaseSerializer(ABC):
    """
    Abstract base class for record exporters.
    Subclasses render a table and its records into the bytes of one file.
    """

    format_name = ""
    extension = ""
    media_type = "application/octet-stream"

    def __init__(self, export_settings: Optional[ExportSettings] = None):
        self.options = export_settings or get_settings().export
        self.logger = logger

    @abstractmethod
    def serialize(self, table: Table, records: Sequence[Record]) -> bytes:
        """
        Render records

        Args:
            table: Table whose fields drive the columns
            records: Records to export

        Returns:
            File content
        """
        pass

    def columns(self, table: Table) -> List[TableField]:
        return table.ordered_fields()

    def headers(self, table: Table) -> List[str]:
        return [f.label or f.name for f in self.columns(table)] + [self.options.created_at_label]

    def file_name(self, table: Table) -> str:
        return f"{table.name}_{utcnow().date().isoformat()}.{self.extension}"
