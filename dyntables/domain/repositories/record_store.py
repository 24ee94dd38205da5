from abc import ABC, abstractmethod
from datetime import date
from typing import List, Tuple

from dyntables.domain.entities.query import QueryResult, RecordQuery
from dyntables.domain.entities.record import Record
from dyntables.domain.entities.table import Table


class RecordStore(ABC):
    """
    Persistence port for tables and their records.

    Every lookup is scoped by tenant (``c_name``). Missing tables and
    records raise NotFoundError, duplicate slugs raise ConflictError.
    """

    # Tables

    @abstractmethod
    async def get_table(self, c_name: str, slug: str, include_inactive: bool = False) -> Table:
        """Soft-deleted tables raise NotFoundError unless ``include_inactive``."""

    @abstractmethod
    async def get_table_by_id(self, table_id: str, include_inactive: bool = False) -> Table:
        pass

    @abstractmethod
    async def list_tables(self, c_name: str, include_inactive: bool = False) -> List[Table]:
        pass

    @abstractmethod
    async def insert_table(self, table: Table) -> Table:
        pass

    @abstractmethod
    async def update_table(self, table: Table) -> Table:
        pass

    @abstractmethod
    async def delete_table(self, c_name: str, table_id: str) -> None:
        """Soft delete: the table is kept with ``is_active=False``."""

    # Records

    @abstractmethod
    async def insert_record(self, record: Record) -> Record:
        pass

    @abstractmethod
    async def get_record(self, c_name: str, record_id: str) -> Record:
        pass

    @abstractmethod
    async def update_record(self, record: Record) -> Record:
        pass

    @abstractmethod
    async def delete_record(self, c_name: str, record_id: str) -> None:
        pass

    @abstractmethod
    async def list_records(self, c_name: str, table_slug: str) -> List[Record]:
        pass

    @abstractmethod
    async def query_records(self, c_name: str, table_slug: str, query: RecordQuery) -> QueryResult:
        pass

    # Statistics

    @abstractmethod
    async def count_records(self, c_name: str, table_slug: str) -> int:
        pass

    @abstractmethod
    async def recent_record_count(self, c_name: str, table_slug: str, since_days: int) -> int:
        pass

    @abstractmethod
    async def daily_record_counts(self, c_name: str, table_slug: str, days: int) -> List[Tuple[date, int]]:
        pass
