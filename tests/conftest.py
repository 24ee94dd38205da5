"""
Pytest configuration and fixtures for the dyntables tests.
"""
import os

# Settings are read once at import time
os.environ["ENVIRONMENT"] = "testing"
os.environ["STORE_BACKEND"] = "memory"
os.environ["DATABASE_URL"] = "sqlite://"

from datetime import datetime

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from dyntables.core.config import ExportSettings
from dyntables.domain.entities.record import Record
from dyntables.domain.entities.table import Table, TableField
from dyntables.infrastructure.db.repositories.factory import set_default_store
from dyntables.infrastructure.db.repositories.memory_store import InMemoryRecordStore

TENANT = "acme"


def make_contacts_table(c_name: str = TENANT) -> Table:
    return Table(
        c_name=c_name,
        name="Contactos",
        fields=[
            TableField(name="nombre", label="Nombre", type="text", required=True, order=1),
            TableField(name="email", label="Email", type="email", required=True, order=2),
            TableField(name="edad", label="Edad", type="number", order=3),
            TableField(name="activo", label="Activo", type="boolean", order=4),
            TableField(name="estado", label="Estado", type="select", options=["nuevo", "cliente"], order=5),
            TableField(name="alta", label="Alta", type="date", order=6),
            TableField(name="monto", label="Monto", type="currency", order=7),
            TableField(name="adjuntos", label="Adjuntos", type="file", order=8),
        ],
    )


@pytest.fixture
def contacts_table() -> Table:
    return make_contacts_table()


@pytest.fixture
def store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest_asyncio.fixture
async def stored_table(store, contacts_table) -> Table:
    return await store.insert_table(contacts_table)


@pytest.fixture
def make_record():
    """Build a record of the contacts table with a fixed creation time."""
    def _make(data, created_at=None, table_slug="contactos", c_name=TENANT):
        record = Record(table_slug=table_slug, c_name=c_name, data=dict(data))
        if created_at is not None:
            record.created_at = created_at
            record.updated_at = created_at
        return record
    return _make


@pytest.fixture
def export_settings() -> ExportSettings:
    return ExportSettings()


@pytest.fixture
def client(store):
    """Test client wired to a fresh in-memory store."""
    from dyntables.main import create_application

    set_default_store(store)
    try:
        yield TestClient(create_application(), headers={"X-Company": TENANT, "X-User-Id": "u-1"})
    finally:
        set_default_store(None)


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 3, 1, 12, 0, 0)
