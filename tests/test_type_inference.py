from dyntables.core.enums import FieldType
from dyntables.domain.entities.import_batch import ImportBatch
from dyntables.transformers.type_inference import TypeInference, detect_type, infer_schema


class TestDetectType:
    def test_numbers_win_over_dates_and_booleans(self):
        assert detect_type(["1", "0", "1"]) == FieldType.NUMBER
        assert detect_type(["20240101", "20240202"]) == FieldType.NUMBER

    def test_dates(self):
        assert detect_type(["2024-01-15", "15/02/2024"]) == FieldType.DATE

    def test_booleans(self):
        assert detect_type(["true", "FALSE"]) == FieldType.BOOLEAN

    def test_blanks_are_ignored(self):
        assert detect_type(["", None, "3"]) == FieldType.NUMBER
        assert detect_type([None, ""]) == FieldType.TEXT

    def test_mixed_is_text(self):
        assert detect_type(["3", "tres"]) == FieldType.TEXT


def test_infer_schema_of_people_sheet():
    fields = infer_schema(
        ["Nombre", "Edad", "Activo"],
        [["Ana", "30", "true"], ["Luis", "41", "false"]],
    )

    assert [(f.name, f.type) for f in fields] == [
        ("nombre", FieldType.TEXT),
        ("edad", FieldType.NUMBER),
        ("activo", FieldType.BOOLEAN),
    ]
    assert [f.label for f in fields] == ["Nombre", "Edad", "Activo"]
    assert [f.order for f in fields] == [1, 2, 3]


def test_short_rows_count_as_blank():
    fields = infer_schema(["A", "B"], [["1"], ["2", "x"]])
    assert fields[0].type == FieldType.NUMBER
    assert fields[1].type == FieldType.TEXT


def test_sample_rows_limits_inspection():
    fields = infer_schema(["A"], [["1"], ["2"], ["tres"]], sample_rows=2)
    assert fields[0].type == FieldType.NUMBER


def test_stage_sets_batch_fields():
    batch = ImportBatch(headers=["Total"], rows=[])
    result = TypeInference()(batch)

    assert batch.fields[0].type == FieldType.TEXT
    assert result.metadata["types"] == {"total": "text"}
    assert result.warnings
