from datetime import datetime

import pytest

from dyntables.core.enums import FieldErrorReason, FieldType
from dyntables.core.exceptions import SchemaDefinitionError
from dyntables.domain.entities.query import QueryResult
from dyntables.domain.entities.table import Table, TableField
from dyntables.domain.value_objects.field_value import (
    BooleanValue,
    CurrencyValue,
    DateValue,
    FieldValueError,
    FileValue,
    parse_field_value,
)


class TestTableDefinition:
    def test_slug_and_names_are_derived(self):
        table = Table(c_name="acme", name="Órdenes de Compra", fields=[TableField(name="", label="Número de Orden")])
        assert table.slug == "ordenes-de-compra"
        assert table.fields[0].name == "numero_de_orden"

    def test_duplicate_field_names_are_rejected(self):
        with pytest.raises(SchemaDefinitionError) as exc:
            Table(c_name="acme", name="T", fields=[
                TableField(name="a", label="A"),
                TableField(name="a", label="Otra A"),
            ])
        assert exc.value.details["duplicate_fields"] == ["a"]

    def test_slug_must_be_url_safe(self):
        with pytest.raises(SchemaDefinitionError):
            Table(c_name="acme", name="T", slug="Not Safe", fields=[TableField(name="a", label="A")])

    def test_options_only_kept_for_select(self):
        text_field = TableField(name="a", label="A", type="text", options=["x"])
        select_field = TableField(name="b", label="B", type="select", options=["x"])
        assert text_field.options == []
        assert select_field.options == ["x"]

    def test_field_without_name_or_label(self):
        with pytest.raises(SchemaDefinitionError):
            TableField(name="", label="")

    def test_dict_round_trip(self, contacts_table):
        copy = Table.from_dict(contacts_table.to_dict())
        assert copy.to_dict() == contacts_table.to_dict()

    def test_from_dict_accepts_camel_case_default(self):
        table_field = TableField.from_dict({"label": "Estado", "type": "select", "defaultValue": "nuevo"})
        assert table_field.default_value == "nuevo"
        assert table_field.type == FieldType.SELECT


class TestFieldValues:
    def test_date_primitive_is_iso(self):
        value = parse_field_value(FieldType.DATE, "15/01/2024")
        assert isinstance(value, DateValue)
        assert value.to_primitive() == "2024-01-15T00:00:00"

    def test_date_from_excel_serial(self):
        assert parse_field_value(FieldType.DATE, 45306).to_primitive() == "2024-01-15T00:00:00"
        assert parse_field_value(FieldType.DATE, 45306.5).value == datetime(2024, 1, 15, 12, 0)
        for raw in (True, 0, 500000):
            with pytest.raises(FieldValueError) as exc:
                parse_field_value(FieldType.DATE, raw)
            assert exc.value.reason == FieldErrorReason.INVALID_DATE

    def test_currency_is_numeric(self):
        value = parse_field_value("currency", "12.50")
        assert isinstance(value, CurrencyValue)
        assert value.to_primitive() == 12.5

    def test_boolean_from_token(self):
        assert parse_field_value("boolean", "false") == BooleanValue(False)

    def test_file_string_becomes_list(self):
        value = parse_field_value("file", "https://cdn.example.com/a.pdf")
        assert isinstance(value, FileValue)
        assert value.to_primitive() == ["https://cdn.example.com/a.pdf"]

    def test_file_rejects_non_uri(self):
        with pytest.raises(FieldValueError) as exc:
            parse_field_value("file", ["a.pdf"])
        assert exc.value.reason == FieldErrorReason.INVALID_FILE

    def test_select_strict(self):
        assert parse_field_value("select", "otro", choices=["a"]).value == "otro"
        with pytest.raises(FieldValueError) as exc:
            parse_field_value("select", "otro", choices=["a"], strict_select=True)
        assert exc.value.reason == FieldErrorReason.INVALID_OPTION

    def test_text_rejects_boolean(self):
        with pytest.raises(FieldValueError) as exc:
            parse_field_value("text", True)
        assert exc.value.reason == FieldErrorReason.INVALID_TEXT


class TestQueryResult:
    def test_pages(self):
        assert QueryResult(records=[], total=25, page=1, page_size=10).pages == 3
        assert QueryResult(records=[], total=0, page=1, page_size=10).pages == 0

    def test_has_next(self):
        assert QueryResult(records=[], total=25, page=2, page_size=10).has_next
        assert not QueryResult(records=[], total=25, page=3, page_size=10).has_next
