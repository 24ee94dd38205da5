import io
import json
from datetime import datetime

import pytest
from openpyxl import Workbook

from dyntables.core.exceptions import ImportProcessingException
from dyntables.processors import CSVProcessor, ExcelProcessor, JSONProcessor, get_processor, processor_for_file


def xlsx_bytes(rows, title="Datos"):
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = title
    for row in rows:
        sheet.append(row)
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


class TestCSVProcessor:
    async def test_semicolon_latin1_file(self):
        content = "Nombre;Ciudad\nJosé;Bogotá\nAna;\n".encode("latin-1")
        sheet = await CSVProcessor().read(content, "clientes.csv")

        assert sheet.rows[1] == ["Ana", None]
        assert sheet.metadata["encoding"] != "utf-8"
        assert sheet.headers == ["Nombre", "Ciudad"]
        assert sheet.metadata["delimiter"] == ";"

    async def test_bom_is_stripped(self):
        content = b"\xef\xbb\xbfa,b\n1,2\n"
        sheet = await CSVProcessor().read(content, "x.csv")
        assert sheet.headers == ["a", "b"]
        assert sheet.rows == [["1", "2"]]

    async def test_inner_blank_lines_are_kept(self):
        content = b"a,b\n1,2\n\n3,4\n\n"
        sheet = await CSVProcessor().read(content, "x.csv")
        assert sheet.headers == ["a", "b"]
        assert sheet.rows == [["1", "2"], [None, None], ["3", "4"]]

    async def test_empty_file(self):
        with pytest.raises(ImportProcessingException):
            await CSVProcessor().read(b"  ", "x.csv")

    async def test_row_limit(self):
        content = b"a\n1\n2\n3\n"
        with pytest.raises(ImportProcessingException) as exc:
            await CSVProcessor(max_rows=2).read(content, "x.csv")
        assert exc.value.details["max_rows"] == 2


class TestExcelProcessor:
    async def test_native_types_survive(self):
        content = xlsx_bytes([
            ["Nombre", "Edad", "Alta"],
            ["Ana", 30, datetime(2024, 1, 15)],
            [None, None, None],
            ["Luis", 41, None],
        ])
        sheet = await ExcelProcessor().read(content, "datos.xlsx")

        assert sheet.headers == ["Nombre", "Edad", "Alta"]
        assert sheet.rows == [
            ["Ana", 30, datetime(2024, 1, 15)],
            [None, None, None],
            ["Luis", 41, None],
        ]

    async def test_named_sheet(self):
        content = xlsx_bytes([["a"], ["1"]], title="Hoja2")
        assert await ExcelProcessor().list_sheets(content) == ["Hoja2"]
        sheet = await ExcelProcessor(sheet_name="Hoja2").read(content, "datos.xlsx")
        assert sheet.sheet_name == "Hoja2"

    async def test_not_an_excel_file(self):
        with pytest.raises(ImportProcessingException):
            await ExcelProcessor().read(b"not a zip", "datos.xlsx")


class TestJSONProcessor:
    async def test_array_of_objects(self):
        content = json.dumps([{"a": 1}, {"a": 2, "b": "x"}]).encode()
        sheet = await JSONProcessor().read(content, "x.json")
        assert sheet.headers == ["a", "b"]
        assert sheet.rows == [[1, None], [2, "x"]]

    async def test_record_export(self):
        content = json.dumps({"records": [{"id": "1", "data": {"nombre": "Ana"}}]}).encode()
        sheet = await JSONProcessor().read(content, "export.json")
        assert sheet.headers == ["nombre"]
        assert sheet.rows == [["Ana"]]

    async def test_invalid_json(self):
        with pytest.raises(ImportProcessingException):
            await JSONProcessor().read(b"{nope", "x.json")


def test_processor_lookup():
    assert isinstance(processor_for_file("Datos.XLSX"), ExcelProcessor)
    assert isinstance(processor_for_file("upload", "text/csv"), CSVProcessor)
    with pytest.raises(ImportProcessingException):
        get_processor("pdf")
