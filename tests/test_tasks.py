import asyncio

import pytest

from dyntables.core.exceptions import NotFoundError
from dyntables.infrastructure.db.repositories.factory import set_default_store
from dyntables.tasks.import_tasks import import_records_task


@pytest.fixture
def worker_store(store, contacts_table):
    asyncio.run(store.insert_table(contacts_table))
    set_default_store(store)
    yield store
    set_default_store(None)


def test_import_task_returns_report(worker_store):
    result = import_records_task.apply(args=(
        "acme",
        "contactos",
        ["Nombre", "Email"],
        [["Ana", "ana@x.com"], ["Luis", ""]],
    ), kwargs={"created_by": "u-9"})

    report = result.get()
    assert result.successful()
    assert report["successful"] == 1
    assert report["failed"] == 1
    assert report["errors"][0]["row_index"] == 2

    records = asyncio.run(worker_store.list_records("acme", "contactos"))
    assert [r.created_by for r in records] == ["u-9"]


def test_import_task_propagates_missing_table(worker_store):
    with pytest.raises(NotFoundError):
        import_records_task.apply(args=("acme", "nope", ["a"], [["1"]])).get()
