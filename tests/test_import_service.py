import io

import pytest
from openpyxl import Workbook

from dyntables.core.config import Settings
from dyntables.core.enums import FieldType
from dyntables.core.exceptions import ImportProcessingException, NotFoundError
from dyntables.services import ImportService
from dyntables.services.import_service import records_to_rows

TENANT = "acme"


@pytest.fixture
def service(store):
    return ImportService(store)


def test_records_to_rows_keeps_first_seen_key_order():
    headers, rows = records_to_rows([
        {"nombre": "Ana", "edad": 30},
        {"data": {"edad": 41, "email": "luis@x.com"}},
    ])
    assert headers == ["nombre", "edad", "email"]
    assert rows == [["Ana", 30, None], [None, 41, "luis@x.com"]]


def test_row_limit(store):
    settings = Settings()
    settings.imports.max_rows = 2
    with pytest.raises(ImportProcessingException) as exc:
        ImportService(store, settings).check_size([[1], [2], [3]])
    assert exc.value.details == {"rows": 3, "max_rows": 2}


async def test_import_rows_reports_duplicates_and_failures(service, store, stored_table):
    report = await service.import_rows(
        TENANT,
        "contactos",
        ["Nombre", "Email", "Edad"],
        [
            ["Ana", "ana@x.com", "30"],
            ["Ana", "ana@x.com", "30"],
            [None, None, None],
            ["Luis", None, "41"],
            ["Eva", "eva@x.com", "veinte"],
            ["Sol", "sol@x.com", ""],
        ],
        created_by="u-1",
    )

    assert report.table_slug == "contactos"
    assert report.duplicates_removed == 1
    assert report.successful == 2
    assert report.failed == 2
    assert [e.row_index for e in report.errors] == [4, 5]
    assert report.errors[0].field_errors[0].reason == "MISSING_REQUIRED"

    stored = await store.list_records(TENANT, "contactos")
    assert sorted(r.data["nombre"] for r in stored) == ["Ana", "Sol"]
    assert all(r.created_by == "u-1" for r in stored)
    by_name = {r.data["nombre"]: r.data for r in stored}
    assert by_name["Ana"]["edad"] == 30
    assert by_name["Sol"].get("edad") is None

    summary = report.to_dict()
    assert summary["successful"] == 2
    assert summary["errors"][0]["row_index"] == 4


async def test_import_into_unknown_table(service):
    with pytest.raises(NotFoundError):
        await service.import_rows(TENANT, "nope", ["a"], [["1"]])


async def test_import_records(service, store, stored_table):
    report = await service.import_records(TENANT, "contactos", [
        {"nombre": "Ana", "email": "ana@x.com", "activo": "true"},
        {"data": {"nombre": "Luis", "email": "luis@x.com"}},
    ])
    assert report.successful == 2
    assert await store.count_records(TENANT, "contactos") == 2


async def test_import_csv_file(service, store, stored_table):
    content = "Nombre,Email,Edad\r\nAna,ana@x.com,30\r\nLuis,luis@x.com,41\r\n".encode("utf-8")
    report = await service.import_file(TENANT, "contactos", content, "contactos.csv")

    assert report.successful == 2
    ages = sorted(r.data["edad"] for r in await store.list_records(TENANT, "contactos"))
    assert ages == [30, 41]


async def test_blank_csv_line_before_invalid_row(service, stored_table):
    content = b"Nombre,Email\nAna,ana@x.com\n\nLuis,\n"
    report = await service.import_file(TENANT, "contactos", content, "contactos.csv")

    assert report.successful == 1
    assert [e.row_index for e in report.errors] == [3]


async def test_blank_xlsx_row_before_invalid_row(service, stored_table):
    workbook = Workbook()
    sheet = workbook.active
    sheet.append(["Nombre", "Email", "Edad"])
    sheet.append(["Ana", "ana@x.com", 30])
    sheet.append([None, None, None])
    sheet.append(["Luis", "luis@x.com", "cuarenta"])
    buffer = io.BytesIO()
    workbook.save(buffer)

    report = await service.import_file(TENANT, "contactos", buffer.getvalue(), "contactos.xlsx")

    assert report.successful == 1
    assert [e.row_index for e in report.errors] == [3]
    assert report.errors[0].field_errors[0].reason == "INVALID_NUMBER"


async def test_create_table_from_rows(service, store):
    table, report = await service.create_table_from_rows(
        TENANT,
        "Ventas 2024",
        ["Cliente", "Importe", "Fecha"],
        [["Ana", "10.5", "2024-01-15"], ["Luis", "20", "2024-02-01"]],
        created_by="u-1",
    )

    assert table.slug == "ventas-2024"
    assert [(f.name, f.type) for f in table.fields] == [
        ("cliente", FieldType.TEXT),
        ("importe", FieldType.NUMBER),
        ("fecha", FieldType.DATE),
    ]
    assert report.successful == 2
    assert [f.name for f in report.fields] == ["cliente", "importe", "fecha"]
    assert await store.count_records(TENANT, "ventas-2024") == 2


async def test_create_table_needs_columns(service):
    with pytest.raises(ImportProcessingException):
        await service.create_table_from_rows(TENANT, "Vacía", [], [])


def test_infer_fields_preview(service):
    fields = service.infer_fields(["Activo"], [["true"], ["false"]])
    assert [(f.name, f.type) for f in fields] == [("activo", FieldType.BOOLEAN)]
