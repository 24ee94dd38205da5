import copy
from datetime import date
from typing import Dict, List, Tuple

from dyntables.core.exceptions import ConflictError, NotFoundError
from dyntables.core.logging import get_logger
from dyntables.domain.entities.query import QueryResult, RecordQuery
from dyntables.domain.entities.record import Record
from dyntables.domain.entities.table import Table
from dyntables.domain.repositories.record_store import RecordStore
from dyntables.services.query_engine import daily_counts, query
from dyntables.utils.date_utils import days_ago

logger = get_logger(__name__)


class InMemoryRecordStore(RecordStore):
    """
    Dict-backed store. Entities are copied on the way in and out, so
    callers only change stored state through the store methods.
    """

    def __init__(self):
        self._tables: Dict[str, Table] = {}
        self._records: Dict[str, Record] = {}

    # Tables

    async def get_table(self, c_name: str, slug: str, include_inactive: bool = False) -> Table:
        for table in self._tables.values():
            if table.c_name == c_name and table.slug == slug and (include_inactive or table.is_active):
                return copy.deepcopy(table)
        raise NotFoundError("Table", slug)

    async def get_table_by_id(self, table_id: str, include_inactive: bool = False) -> Table:
        table = self._tables.get(table_id)
        if table is None or not (include_inactive or table.is_active):
            raise NotFoundError("Table", table_id)
        return copy.deepcopy(table)

    async def list_tables(self, c_name: str, include_inactive: bool = False) -> List[Table]:
        tables = [
            copy.deepcopy(t) for t in self._tables.values()
            if t.c_name == c_name and (include_inactive or t.is_active)
        ]
        return sorted(tables, key=lambda t: t.created_at)

    def _slug_taken(self, table: Table) -> bool:
        return any(
            t.c_name == table.c_name and t.slug == table.slug and t.id != table.id
            for t in self._tables.values()
        )

    async def insert_table(self, table: Table) -> Table:
        if self._slug_taken(table):
            raise ConflictError(f"Table slug '{table.slug}' already exists", resource="Table")
        self._tables[table.id] = copy.deepcopy(table)
        logger.debug(f"Inserted table {table.c_name}/{table.slug}")
        return copy.deepcopy(table)

    async def update_table(self, table: Table) -> Table:
        if table.id not in self._tables:
            raise NotFoundError("Table", table.id)
        if self._slug_taken(table):
            raise ConflictError(f"Table slug '{table.slug}' already exists", resource="Table")
        self._tables[table.id] = copy.deepcopy(table)
        return copy.deepcopy(table)

    async def delete_table(self, c_name: str, table_id: str) -> None:
        table = self._tables.get(table_id)
        if table is None or table.c_name != c_name:
            raise NotFoundError("Table", table_id)
        table.is_active = False
        table.touch()

    # Records

    async def insert_record(self, record: Record) -> Record:
        self._records[record.id] = copy.deepcopy(record)
        return copy.deepcopy(record)

    async def get_record(self, c_name: str, record_id: str) -> Record:
        record = self._records.get(record_id)
        if record is None or record.c_name != c_name:
            raise NotFoundError("Record", record_id)
        return copy.deepcopy(record)

    async def update_record(self, record: Record) -> Record:
        stored = self._records.get(record.id)
        if stored is None or stored.c_name != record.c_name:
            raise NotFoundError("Record", record.id)
        self._records[record.id] = copy.deepcopy(record)
        return copy.deepcopy(record)

    async def delete_record(self, c_name: str, record_id: str) -> None:
        record = self._records.get(record_id)
        if record is None or record.c_name != c_name:
            raise NotFoundError("Record", record_id)
        del self._records[record_id]

    def _table_records(self, c_name: str, table_slug: str) -> List[Record]:
        return [
            r for r in self._records.values()
            if r.c_name == c_name and r.table_slug == table_slug
        ]

    async def list_records(self, c_name: str, table_slug: str) -> List[Record]:
        records = sorted(self._table_records(c_name, table_slug), key=lambda r: r.created_at)
        return copy.deepcopy(records)

    async def query_records(self, c_name: str, table_slug: str, record_query: RecordQuery) -> QueryResult:
        table = await self.get_table(c_name, table_slug)
        result = query(self._table_records(c_name, table_slug), record_query, table)
        result.records = copy.deepcopy(result.records)
        return result

    # Statistics

    async def count_records(self, c_name: str, table_slug: str) -> int:
        return len(self._table_records(c_name, table_slug))

    async def recent_record_count(self, c_name: str, table_slug: str, since_days: int) -> int:
        since = days_ago(since_days)
        return sum(1 for r in self._table_records(c_name, table_slug) if r.created_at >= since)

    async def daily_record_counts(self, c_name: str, table_slug: str, days: int) -> List[Tuple[date, int]]:
        return daily_counts((r.created_at for r in self._table_records(c_name, table_slug)), days)
