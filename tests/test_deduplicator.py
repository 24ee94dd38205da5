from dyntables.domain.entities.import_batch import ImportBatch
from dyntables.transformers.deduplicator import Deduplicator, composite_key, dedup


def test_case_and_whitespace_insensitive():
    result = dedup([{"a": "X"}, {"a": " x "}], ["a"])

    assert result.removed_count == 1
    assert result.unique == [{"a": "X"}]
    assert result.original_count == 2
    assert result.final_count == 1


def test_first_occurrence_wins_and_order_is_kept():
    records = [{"a": "1"}, {"a": "2"}, {"a": "1"}, {"a": "3"}]
    assert [r["a"] for r in dedup(records, ["a"]).unique] == ["1", "2", "3"]


def test_dedup_is_idempotent():
    records = [{"a": "X", "b": 1}, {"a": "x", "b": 1.0}, {"a": "y", "b": 2}]
    once = dedup(records, ["a", "b"]).unique
    twice = dedup(once, ["a", "b"]).unique
    assert once == twice


def test_integral_floats_match_ints():
    assert composite_key({"n": 1.0}, ["n"]) == composite_key({"n": "1"}, ["n"])


def test_all_blank_keys_are_never_duplicates():
    result = dedup([{"a": None}, {"a": ""}, {"a": None}], ["a"])
    assert result.removed_count == 0


def test_key_fields_subset():
    records = [
        {"email": "ana@x.com", "nombre": "Ana"},
        {"email": "ANA@x.com", "nombre": "Ana María"},
    ]
    assert dedup(records, ["email", "nombre"]).removed_count == 0
    result = dedup(records, ["email", "nombre"], key_fields=["email"])
    assert result.removed_count == 1
    assert result.duplicate_fields == {"email": 1, "nombre": 1}


def test_stage_keeps_row_numbers_aligned():
    batch = ImportBatch(headers=["a"], rows=[])
    batch.fields = ["a"]
    batch.records = [{"a": "1"}, {"a": "1"}, {"a": "2"}]
    batch.row_numbers = [1, 2, 4]

    result = Deduplicator()(batch)

    assert batch.records == [{"a": "1"}, {"a": "2"}]
    assert batch.row_numbers == [1, 4]
    assert batch.duplicates_removed == 1
    assert result.metadata["final_count"] == 2
    assert result.warnings == ["1 duplicate rows removed"]


def test_separator_characters_do_not_merge_keys():
    records = [{"a": "x|", "b": ""}, {"a": "x", "b": "|"}]
    assert dedup(records, ["a", "b"]).removed_count == 0


def test_separator_only_values_are_not_blank_keys():
    records = [{"a": "|", "b": None}, {"a": "|", "b": None}]
    assert dedup(records, ["a", "b"]).removed_count == 1
