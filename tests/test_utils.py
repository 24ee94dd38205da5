from datetime import datetime

import pytest

from dyntables.utils.date_utils import excel_serial_to_datetime, is_excel_serial, parse_datetime
from dyntables.utils.text_utils import field_name, slugify, table_slug
from dyntables.utils.validation_utils import (
    IMPORT_BOOLEAN_TOKENS,
    is_blank,
    is_uri,
    parse_boolean,
    parse_number,
)


class TestTextUtils:
    def test_field_name_strips_accents_and_symbols(self):
        assert field_name("Teléfono Móvil") == "telefono_movil"
        assert field_name("  ¿Año de alta?  ") == "ano_de_alta"

    def test_table_slug_uses_hyphens(self):
        assert table_slug("Clientes Potenciales 2024") == "clientes-potenciales-2024"

    def test_slugify_of_symbols_only_is_empty(self):
        assert slugify("!!!") == ""
        assert slugify("") == ""


class TestNumbers:
    @pytest.mark.parametrize("raw,expected", [
        ("42", 42),
        (" -3 ", -3),
        ("3.5", 3.5),
        ("1e3", 1000.0),
        (7, 7),
        (2.25, 2.25),
    ])
    def test_parse_number(self, raw, expected):
        assert parse_number(raw) == expected

    @pytest.mark.parametrize("raw", ["abc", "1,234", "", True, float("nan"), float("inf"), None])
    def test_parse_number_rejects(self, raw):
        assert parse_number(raw) is None

    def test_integral_string_becomes_int(self):
        assert isinstance(parse_number("10"), int)


class TestBooleans:
    def test_record_tokens(self):
        assert parse_boolean("TRUE") is True
        assert parse_boolean("0") is False
        assert parse_boolean(1) is True
        assert parse_boolean("sí") is None

    def test_import_tokens(self):
        assert parse_boolean("Sí", tokens=IMPORT_BOOLEAN_TOKENS) is True
        assert parse_boolean("no", tokens=IMPORT_BOOLEAN_TOKENS) is False

    def test_other_integers_are_not_booleans(self):
        assert parse_boolean(2) is None


class TestBlankAndUri:
    @pytest.mark.parametrize("value", [None, "", "   ", float("nan"), []])
    def test_blank(self, value):
        assert is_blank(value)

    @pytest.mark.parametrize("value", [0, False, "x", [None]])
    def test_not_blank(self, value):
        assert not is_blank(value)

    def test_uri(self):
        assert is_uri("https://cdn.example.com/a.pdf")
        assert is_uri("s3://bucket/key.png")
        assert is_uri("/uploads/a.pdf")
        assert not is_uri("documento.pdf")
        assert not is_uri("javascript:alert(1)")


class TestDates:
    def test_iso(self):
        assert parse_datetime("2024-02-01") == datetime(2024, 2, 1)
        assert parse_datetime("2024-02-01T10:30:00Z") == datetime(2024, 2, 1, 10, 30)

    def test_day_first_for_slash_dates(self):
        assert parse_datetime("03/02/2024") == datetime(2024, 2, 3)

    def test_numbers_and_words_are_not_dates(self):
        assert parse_datetime("2024") is None
        assert parse_datetime("45000") is None
        assert parse_datetime("mayo") is None
        assert parse_datetime(45000) is None

    def test_excel_serial(self):
        assert is_excel_serial(45322)
        assert not is_excel_serial(True)
        assert excel_serial_to_datetime(45322) == datetime(2024, 1, 31)
