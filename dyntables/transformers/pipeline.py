# ==============================================
# dyntables/transformers/pipeline.py
# ==============================================
from typing import Any, Dict, List, Optional, Sequence, Tuple

from dyntables.core.logging import get_logger, log_execution_time
from dyntables.domain.entities.import_batch import ImportBatch, ImportReport
from dyntables.domain.entities.table import Table, TableField
from dyntables.domain.value_objects.errors import ImportRowError
from dyntables.transformers.base_transformer import BaseStage, StageResult
from dyntables.transformers.deduplicator import Deduplicator
from dyntables.transformers.header_normalizer import HeaderNormalizer, normalize_headers
from dyntables.transformers.record_validator import RecordValidator, apply_defaults
from dyntables.transformers.type_inference import TypeInference
from dyntables.transformers.value_coercer import ValueCoercer
from dyntables.utils.text_utils import field_name
from dyntables.utils.validation_utils import is_blank

logger = get_logger(__name__)


def match_columns(headers: Sequence[Any], fields: Sequence[TableField]) -> List[Optional[TableField]]:
    """
    Map each spreadsheet column onto a field of an existing table.

    A column matches a field by normalized name or by label. Columns
    without a match map to None.
    """
    by_key: Dict[str, TableField] = {}
    for table_field in fields:
        by_key.setdefault(table_field.name, table_field)
        by_key.setdefault(field_name(table_field.label), table_field)

    return [by_key.get(name) for name, _label in normalize_headers(headers)]


def rows_to_records(
    headers: Sequence[Any],
    rows: Sequence[Sequence[Any]],
    fields: Sequence[TableField],
) -> Tuple[List[Dict[str, Any]], List[int]]:
    """
    Turn positional rows into record data maps.

    Fully blank rows are skipped. Returns the records and the 1-based data
    row number each one came from.
    """
    columns = match_columns(headers, fields)
    records: List[Dict[str, Any]] = []
    row_numbers: List[int] = []

    for number, row in enumerate(rows, start=1):
        data = {}
        for index, table_field in enumerate(columns):
            if table_field is None or table_field.name in data:
                continue
            data[table_field.name] = row[index] if index < len(row) else None

        if all(is_blank(v) for v in data.values()):
            continue
        records.append(data)
        row_numbers.append(number)

    return records, row_numbers


class ImportPipeline:
    """
    Runs raw spreadsheet rows through header normalization, type inference,
    deduplication, value coercion and validation.

    Args:
        key_fields: Fields forming the duplicate key, every field when empty
        sample_rows: Rows inspected for type inference, 0 for all
        validator: Validator used for the final stage
    """

    def __init__(self,
                 key_fields: Optional[Sequence[str]] = None,
                 sample_rows: int = 0,
                 validator: Optional[RecordValidator] = None):
        self.key_fields = list(key_fields or [])
        self.sample_rows = sample_rows
        self.validator = validator or RecordValidator()
        self.logger = logger

    def _run(self, stage: BaseStage, batch: ImportBatch, results: List[StageResult]) -> StageResult:
        result = stage(batch)
        results.append(result)
        return result

    def prepare(self,
                headers: Sequence[Any],
                rows: Sequence[Sequence[Any]],
                table: Optional[Table] = None) -> Tuple[ImportBatch, List[StageResult]]:
        """
        Build the batch for a set of rows.

        When ``table`` is None the fields are inferred from the data,
        otherwise columns are matched onto the table's fields.
        """
        batch = ImportBatch(headers=list(headers), rows=[list(r) for r in rows])
        results: List[StageResult] = []

        self._run(HeaderNormalizer(), batch, results)

        if table is None:
            self._run(TypeInference(sample_rows=self.sample_rows), batch, results)
        else:
            batch.fields = list(table.fields)
            unmatched = [h for h, f in zip(batch.headers, match_columns(batch.headers, batch.fields)) if f is None]
            if unmatched:
                results[-1].add_warning(f"Columns without a matching field were ignored: {unmatched}")

        batch.records, batch.row_numbers = rows_to_records(batch.headers, batch.rows, batch.fields)
        batch.original_count = len(batch.records)

        self._run(Deduplicator(key_fields=self.key_fields), batch, results)
        self._run(ValueCoercer(), batch, results)

        return batch, results

    def validate(self, table: Table, batch: ImportBatch) -> Tuple[List[Tuple[int, Dict[str, Any]]], List[ImportRowError]]:
        """
        Validate every prepared record against ``table``.

        Returns:
            ``(row_number, data)`` pairs ready to store and the rejected rows
        """
        valid: List[Tuple[int, Dict[str, Any]]] = []
        rejected: List[ImportRowError] = []

        for number, data in zip(batch.row_numbers, batch.records):
            outcome = self.validator.validate_and_coerce(table, apply_defaults(table, data))
            if outcome.is_valid:
                valid.append((number, outcome.data))
            else:
                rejected.append(ImportRowError(
                    row_index=number,
                    reason="VALIDATION_ERROR",
                    field_errors=outcome.errors,
                ))

        return valid, rejected

    @log_execution_time(logger)
    def run(self,
            table: Table,
            headers: Sequence[Any],
            rows: Sequence[Sequence[Any]]) -> Tuple[ImportReport, List[Tuple[int, Dict[str, Any]]]]:
        """
        Prepare and validate rows for ``table``.

        Returns the report (not yet counting storage outcomes) and the
        records that passed validation.
        """
        batch, stage_results = self.prepare(headers, rows, table)
        valid, rejected = self.validate(table, batch)

        report = ImportReport(
            table_slug=table.slug,
            total=batch.original_count,
            failed=len(rejected),
            errors=rejected,
            duplicates_removed=batch.duplicates_removed,
            duplicate_fields=batch.duplicate_fields,
            original_count=batch.original_count,
            final_count=batch.final_count,
            fields=list(table.fields),
            warnings=[w for r in stage_results for w in r.warnings],
        )
        self.logger.info(
            f"Prepared import for '{table.slug}': {len(valid)} valid, "
            f"{len(rejected)} rejected, {batch.duplicates_removed} duplicates"
        )
        return report, valid
