from dyntables.core.enums import FieldType
from dyntables.domain.entities.table import Table, TableField
from dyntables.transformers.pipeline import ImportPipeline, match_columns, rows_to_records
from dyntables.transformers.record_validator import RecordValidator


def people_table():
    return Table(c_name="acme", name="Personas", fields=[
        TableField(name="nombre", label="Nombre", type="text", required=True),
        TableField(name="edad", label="Edad", type="number"),
        TableField(name="activo", label="Activo", type="boolean"),
    ])


def pipeline(**kwargs):
    return ImportPipeline(validator=RecordValidator(strict_select=False, strict_email=False), **kwargs)


def test_columns_match_by_name_or_label():
    table = Table(c_name="acme", name="T", fields=[
        TableField(name="tel", label="Teléfono Móvil"),
        TableField(name="nombre", label="Nombre"),
    ])
    matched = match_columns(["NOMBRE", "Teléfono móvil", "Otro"], table.fields)
    assert [f.name if f else None for f in matched] == ["nombre", "tel", None]


def test_blank_rows_are_skipped_with_row_numbers():
    table = people_table()
    records, numbers = rows_to_records(["Nombre", "Edad"], [["Ana", "3"], [None, ""], ["Luis"]], table.fields)
    assert records == [{"nombre": "Ana", "edad": "3"}, {"nombre": "Luis", "edad": None}]
    assert numbers == [1, 3]


def test_prepare_infers_fields_without_table():
    batch, results = pipeline().prepare(
        ["Nombre", "Edad", "Activo"],
        [["Ana", "30", "true"], ["ana", "30", "TRUE"], ["Luis", "41", "false"]],
    )

    assert [(f.name, f.type) for f in batch.fields] == [
        ("nombre", FieldType.TEXT),
        ("edad", FieldType.NUMBER),
        ("activo", FieldType.BOOLEAN),
    ]
    assert batch.duplicates_removed == 1
    assert batch.records == [
        {"nombre": "Ana", "edad": 30, "activo": True},
        {"nombre": "Luis", "edad": 41, "activo": False},
    ]
    assert [r.metadata["stage"] for r in results] == [
        "normalize_headers", "infer_types", "dedup", "coerce_values",
    ]


def test_run_reports_invalid_rows_without_aborting():
    report, valid = pipeline().run(
        people_table(),
        ["Nombre", "Edad", "Columna extra"],
        [["Ana", "30", "x"], [None, "41", "y"], ["Luis", "cuarenta", "z"]],
    )

    assert [n for n, _ in valid] == [1]
    assert valid[0][1] == {"nombre": "Ana", "edad": 30}
    assert report.failed == 2
    assert [(e.row_index, e.reason) for e in report.errors] == [(2, "VALIDATION_ERROR"), (3, "VALIDATION_ERROR")]
    assert report.errors[0].field_errors[0].field == "nombre"
    assert any("Columna extra" in w for w in report.warnings)


def test_key_fields_limit_duplicate_detection():
    rows = [["Ana", "30"], ["Ana", "31"]]
    report, valid = pipeline().run(people_table(), ["Nombre", "Edad"], rows)
    assert len(valid) == 2

    report, valid = pipeline(key_fields=["nombre"]).run(people_table(), ["Nombre", "Edad"], rows)
    assert len(valid) == 1
    assert report.duplicates_removed == 1
    assert report.original_count == 2
    assert report.final_count == 1
