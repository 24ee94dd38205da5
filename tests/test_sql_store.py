from datetime import timedelta

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import create_engine

from dyntables.core.database import init_db
from dyntables.core.exceptions import ConflictError, NotFoundError
from dyntables.domain.entities.query import RecordQuery
from dyntables.infrastructure.db.repositories.sql_store import SQLRecordStore
from dyntables.utils.date_utils import utcnow

from conftest import make_contacts_table


@pytest.fixture
def sql_store():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield SQLRecordStore(engine)
    engine.dispose()


@pytest.fixture
async def sql_table(sql_store):
    return await sql_store.insert_table(make_contacts_table())


async def test_table_round_trip(sql_store, sql_table):
    loaded = await sql_store.get_table("acme", "contactos")

    assert loaded.id == sql_table.id
    assert loaded.field_names == sql_table.field_names
    assert loaded.get_field("estado").options == ["nuevo", "cliente"]
    assert (await sql_store.get_table_by_id(sql_table.id)).slug == "contactos"


async def test_slug_conflicts_within_tenant_only(sql_store, sql_table):
    with pytest.raises(ConflictError):
        await sql_store.insert_table(make_contacts_table())
    other = await sql_store.insert_table(make_contacts_table("globex"))
    assert other.c_name == "globex"


async def test_soft_delete_hides_table(sql_store, sql_table):
    await sql_store.delete_table("acme", sql_table.id)

    assert await sql_store.list_tables("acme") == []
    assert len(await sql_store.list_tables("acme", include_inactive=True)) == 1
    with pytest.raises(NotFoundError):
        await sql_store.delete_table("globex", sql_table.id)


async def test_deleted_table_reads_as_missing(sql_store, sql_table):
    await sql_store.delete_table("acme", sql_table.id)

    with pytest.raises(NotFoundError):
        await sql_store.get_table("acme", "contactos")
    with pytest.raises(NotFoundError):
        await sql_store.get_table_by_id(sql_table.id)
    with pytest.raises(NotFoundError):
        await sql_store.query_records("acme", "contactos", RecordQuery())

    hidden = await sql_store.get_table("acme", "contactos", include_inactive=True)
    assert hidden.is_active is False
    assert (await sql_store.get_table_by_id(sql_table.id, include_inactive=True)).id == sql_table.id
    with pytest.raises(ConflictError):
        await sql_store.insert_table(make_contacts_table())


async def test_update_table(sql_store, sql_table):
    sql_table.name = "Clientes"
    sql_table.fields = sql_table.fields[:2]
    await sql_store.update_table(sql_table)

    loaded = await sql_store.get_table("acme", "contactos")
    assert loaded.name == "Clientes"
    assert loaded.field_names == ["nombre", "email"]


async def test_record_crud_is_tenant_scoped(sql_store, sql_table, make_record):
    record = await sql_store.insert_record(make_record({"nombre": "Ana", "email": "ana@x.com"}))

    with pytest.raises(NotFoundError):
        await sql_store.get_record("globex", record.id)

    record.data["edad"] = 30
    await sql_store.update_record(record)
    assert (await sql_store.get_record("acme", record.id)).data == {"nombre": "Ana", "email": "ana@x.com", "edad": 30}

    await sql_store.delete_record("acme", record.id)
    with pytest.raises(NotFoundError):
        await sql_store.get_record("acme", record.id)


async def test_query_and_counts(sql_store, sql_table, make_record):
    now = utcnow()
    for index, name in enumerate(["Ana", "Luis", "Eva"]):
        await sql_store.insert_record(make_record(
            {"nombre": name, "email": f"{name.lower()}@x.com", "edad": 20 + index},
            created_at=now - timedelta(days=index * 10),
        ))

    result = await sql_store.query_records("acme", "contactos", RecordQuery(
        filters={"edad": {"gte": 21}},
        sort_field="edad",
        sort_dir="asc",
        page_size=1,
    ))
    assert result.total == 2
    assert result.pages == 2
    assert [r.data["nombre"] for r in result.records] == ["Luis"]

    assert await sql_store.count_records("acme", "contactos") == 3
    assert await sql_store.recent_record_count("acme", "contactos", 7) == 1
    daily = await sql_store.daily_record_counts("acme", "contactos", 7)
    assert len(daily) == 7
    assert sum(count for _, count in daily) == 1
