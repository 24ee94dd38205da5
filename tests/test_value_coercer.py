from datetime import datetime

from dyntables.domain.entities.table import TableField
from dyntables.transformers.value_coercer import coerce_cell, coerce_record


def field(type_, name="f"):
    return TableField(name=name, label=name, type=type_)


def test_blank_cells_become_none():
    assert coerce_cell(field("text"), "  ") is None
    assert coerce_cell(field("number"), float("nan")) is None


def test_amounts_with_symbols_and_grouping():
    assert coerce_cell(field("currency"), "$1,234.50") == 1234.5
    assert coerce_cell(field("number"), "1,000") == 1000
    assert coerce_cell(field("number"), "12") == 12


def test_unconvertible_values_pass_through():
    assert coerce_cell(field("number"), "doce") == "doce"
    assert coerce_cell(field("boolean"), "quizás") == "quizás"


def test_dates():
    assert coerce_cell(field("date"), 45322) == "2024-01-31T00:00:00"
    assert coerce_cell(field("date"), "15/01/2024") == "2024-01-15T00:00:00"
    assert coerce_cell(field("date"), datetime(2024, 1, 2, 3, 4)) == "2024-01-02T03:04:00"


def test_spanish_boolean_tokens():
    assert coerce_cell(field("boolean"), "Sí") is True
    assert coerce_cell(field("boolean"), "no") is False


def test_text_like_fields_get_strings():
    assert coerce_cell(field("text"), 12.0) == "12"
    assert coerce_cell(field("select"), True) == "true"
    assert coerce_cell(field("email"), " ana@x.com ") == "ana@x.com"


def test_file_lists_from_comma_separated_text():
    assert coerce_cell(field("file"), "https://a/1.pdf, https://a/2.pdf") == ["https://a/1.pdf", "https://a/2.pdf"]


def test_unknown_keys_are_left_alone():
    assert coerce_record([field("number", "n")], {"n": "3", "x": "3"}) == {"n": 3, "x": "3"}
