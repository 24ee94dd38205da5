import pytest

from dyntables.core.enums import FieldErrorReason
from dyntables.domain.entities.table import Table, TableField
from dyntables.transformers.record_validator import RecordValidator, apply_defaults, validate, validate_and_coerce


@pytest.fixture
def validator():
    return RecordValidator(strict_select=False, strict_email=False)


def reasons(errors):
    return [(e.field, e.reason) for e in errors]


def test_missing_required_field(validator):
    table = Table(c_name="acme", name="Leads", fields=[
        TableField(name="email", label="Email", type="email", required=True),
    ])
    assert reasons(validator.validate(table, {})) == [("email", FieldErrorReason.MISSING_REQUIRED)]


def test_blank_string_counts_as_missing(validator, contacts_table):
    errors = validator.validate(contacts_table, {"nombre": "  ", "email": "ana@x.com"})
    assert reasons(errors) == [("nombre", FieldErrorReason.MISSING_REQUIRED)]


def test_every_error_is_reported(validator, contacts_table):
    errors = validator.validate(contacts_table, {
        "nombre": "Ana",
        "email": "ana@x.com",
        "edad": "treinta",
        "activo": "quizás",
        "alta": "ayer",
        "adjuntos": ["no-es-url"],
        "color": "rojo",
    })
    assert reasons(errors) == [
        ("edad", FieldErrorReason.INVALID_NUMBER),
        ("activo", FieldErrorReason.INVALID_BOOLEAN),
        ("alta", FieldErrorReason.INVALID_DATE),
        ("adjuntos", FieldErrorReason.INVALID_FILE),
        ("color", FieldErrorReason.UNKNOWN_FIELD),
    ]


def test_valid_data_is_coerced(validator, contacts_table):
    outcome = validator.validate_and_coerce(contacts_table, {
        "nombre": "Ana",
        "email": "ana@x.com",
        "edad": "30",
        "activo": "true",
        "alta": "2024-02-01",
        "monto": "99.90",
        "estado": "",
    })

    assert outcome.is_valid
    assert outcome.data == {
        "nombre": "Ana",
        "email": "ana@x.com",
        "edad": 30,
        "activo": True,
        "alta": "2024-02-01T00:00:00",
        "monto": 99.9,
        "estado": None,
    }


def test_strict_select_and_email(contacts_table):
    strict = RecordValidator(strict_select=True, strict_email=True)
    errors = strict.validate(contacts_table, {"nombre": "Ana", "email": "ana", "estado": "otro"})
    assert reasons(errors) == [
        ("email", FieldErrorReason.INVALID_EMAIL),
        ("estado", FieldErrorReason.INVALID_OPTION),
    ]


def test_lenient_by_default(validator, contacts_table):
    assert validator.validate(contacts_table, {"nombre": "Ana", "email": "ana", "estado": "otro"}) == []


def test_defaults_fill_absent_fields():
    table = Table(c_name="acme", name="Leads", fields=[
        TableField(name="estado", label="Estado", type="select", options=["nuevo"], default_value="nuevo"),
    ])
    assert apply_defaults(table, {}) == {"estado": "nuevo"}
    assert apply_defaults(table, {"estado": "otro"}) == {"estado": "otro"}


def test_module_helpers_use_configured_strictness(contacts_table):
    assert validate(contacts_table, {"nombre": "Ana", "email": "ana"}) == []

    outcome = validate_and_coerce(contacts_table, {"nombre": "Ana", "email": "ana@x.com", "edad": "7"})
    assert outcome.is_valid
    assert outcome.data["edad"] == 7
