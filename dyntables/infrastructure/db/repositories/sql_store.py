from contextlib import contextmanager
from datetime import date
from typing import Generator, List, Optional, Tuple

from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, func, select

from dyntables.core.database import get_engine
from dyntables.core.exceptions import ConflictError, DatabaseError, NotFoundError
from dyntables.core.logging import get_logger
from dyntables.domain.entities.query import QueryResult, RecordQuery
from dyntables.domain.entities.record import Record
from dyntables.domain.entities.table import Table
from dyntables.domain.repositories.record_store import RecordStore
from dyntables.infrastructure.db.models import DynamicRecordModel, DynamicTableModel
from dyntables.services.query_engine import daily_counts, query
from dyntables.utils.date_utils import days_ago

logger = get_logger(__name__)


class SQLRecordStore(RecordStore):
    """
    SQLModel backed store. Tables and records live in ``dynamic_tables`` and
    ``dynamic_records``; record data is a JSON column, so listings are
    filtered in process with the query engine.
    """

    def __init__(self, engine: Optional[Engine] = None):
        self.engine = engine or get_engine()

    @contextmanager
    def _session(self, operation: str) -> Generator[Session, None, None]:
        session = Session(self.engine, expire_on_commit=False)
        try:
            yield session
            session.commit()
        except IntegrityError as e:
            session.rollback()
            logger.warning(f"Integrity error during {operation}: {e}")
            raise ConflictError(f"Conflict during {operation}", details={"error": str(e.orig)})
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Database error during {operation}: {e}")
            raise DatabaseError(f"Failed to {operation}: {str(e)}", operation=operation)
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def _table_model(self, session: Session, c_name: str, slug: str) -> Optional[DynamicTableModel]:
        statement = select(DynamicTableModel).where(
            DynamicTableModel.c_name == c_name,
            DynamicTableModel.slug == slug,
        )
        return session.exec(statement).first()

    # Tables

    async def get_table(self, c_name: str, slug: str, include_inactive: bool = False) -> Table:
        with self._session("get table") as session:
            model = self._table_model(session, c_name, slug)
            if model is None or not (include_inactive or model.is_active):
                raise NotFoundError("Table", slug)
            return model.to_entity()

    async def get_table_by_id(self, table_id: str, include_inactive: bool = False) -> Table:
        with self._session("get table") as session:
            model = session.get(DynamicTableModel, table_id)
            if model is None or not (include_inactive or model.is_active):
                raise NotFoundError("Table", table_id)
            return model.to_entity()

    async def list_tables(self, c_name: str, include_inactive: bool = False) -> List[Table]:
        with self._session("list tables") as session:
            statement = select(DynamicTableModel).where(DynamicTableModel.c_name == c_name)
            if not include_inactive:
                statement = statement.where(DynamicTableModel.is_active == True)  # noqa: E712
            statement = statement.order_by(DynamicTableModel.created_at)
            return [m.to_entity() for m in session.exec(statement).all()]

    async def insert_table(self, table: Table) -> Table:
        with self._session("create table") as session:
            if self._table_model(session, table.c_name, table.slug) is not None:
                raise ConflictError(f"Table slug '{table.slug}' already exists", resource="Table")
            session.add(DynamicTableModel.from_entity(table))
        logger.debug(f"Inserted table {table.c_name}/{table.slug}")
        return table

    async def update_table(self, table: Table) -> Table:
        with self._session("update table") as session:
            model = session.get(DynamicTableModel, table.id)
            if model is None:
                raise NotFoundError("Table", table.id)
            if model.slug != table.slug:
                existing = self._table_model(session, table.c_name, table.slug)
                if existing is not None and existing.id != table.id:
                    raise ConflictError(f"Table slug '{table.slug}' already exists", resource="Table")
            model.apply(table)
            session.add(model)
        return table

    async def delete_table(self, c_name: str, table_id: str) -> None:
        with self._session("delete table") as session:
            model = session.get(DynamicTableModel, table_id)
            if model is None or model.c_name != c_name:
                raise NotFoundError("Table", table_id)
            table = model.to_entity()
            table.is_active = False
            table.touch()
            model.apply(table)
            session.add(model)

    # Records

    async def insert_record(self, record: Record) -> Record:
        with self._session("create record") as session:
            session.add(DynamicRecordModel.from_entity(record))
        return record

    async def get_record(self, c_name: str, record_id: str) -> Record:
        with self._session("get record") as session:
            model = session.get(DynamicRecordModel, record_id)
            if model is None or model.c_name != c_name:
                raise NotFoundError("Record", record_id)
            return model.to_entity()

    async def update_record(self, record: Record) -> Record:
        with self._session("update record") as session:
            model = session.get(DynamicRecordModel, record.id)
            if model is None or model.c_name != record.c_name:
                raise NotFoundError("Record", record.id)
            model.apply(record)
            session.add(model)
        return record

    async def delete_record(self, c_name: str, record_id: str) -> None:
        with self._session("delete record") as session:
            model = session.get(DynamicRecordModel, record_id)
            if model is None or model.c_name != c_name:
                raise NotFoundError("Record", record_id)
            session.delete(model)

    def _records_statement(self, c_name: str, table_slug: str):
        return select(DynamicRecordModel).where(
            DynamicRecordModel.c_name == c_name,
            DynamicRecordModel.table_slug == table_slug,
        )

    async def list_records(self, c_name: str, table_slug: str) -> List[Record]:
        with self._session("list records") as session:
            statement = self._records_statement(c_name, table_slug).order_by(DynamicRecordModel.created_at)
            return [m.to_entity() for m in session.exec(statement).all()]

    async def query_records(self, c_name: str, table_slug: str, record_query: RecordQuery) -> QueryResult:
        table = await self.get_table(c_name, table_slug)
        records = await self.list_records(c_name, table_slug)
        return query(records, record_query, table)

    # Statistics

    async def count_records(self, c_name: str, table_slug: str) -> int:
        with self._session("count records") as session:
            statement = select(func.count()).select_from(DynamicRecordModel).where(
                DynamicRecordModel.c_name == c_name,
                DynamicRecordModel.table_slug == table_slug,
            )
            return session.exec(statement).one()

    async def recent_record_count(self, c_name: str, table_slug: str, since_days: int) -> int:
        with self._session("count records") as session:
            statement = select(func.count()).select_from(DynamicRecordModel).where(
                DynamicRecordModel.c_name == c_name,
                DynamicRecordModel.table_slug == table_slug,
                DynamicRecordModel.created_at >= days_ago(since_days),
            )
            return session.exec(statement).one()

    async def daily_record_counts(self, c_name: str, table_slug: str, days: int) -> List[Tuple[date, int]]:
        with self._session("count records") as session:
            statement = select(DynamicRecordModel.created_at).where(
                DynamicRecordModel.c_name == c_name,
                DynamicRecordModel.table_slug == table_slug,
                DynamicRecordModel.created_at >= days_ago(days),
            )
            timestamps = session.exec(statement).all()
        return daily_counts(timestamps, days)
