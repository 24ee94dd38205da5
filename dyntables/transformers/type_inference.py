from typing import Any, List, Sequence

from dyntables.core.enums import FieldType
from dyntables.domain.entities.import_batch import ImportBatch
from dyntables.domain.entities.table import TableField
from dyntables.transformers.base_transformer import BaseStage, StageResult
from dyntables.transformers.header_normalizer import normalize_headers
from dyntables.utils.date_utils import parse_datetime
from dyntables.utils.validation_utils import is_blank, is_boolean_token, is_number


def detect_type(values: Sequence[Any]) -> FieldType:
    """
    Detect the field type of one column.

    Only non-empty values count. The numeric check runs first so that
    numeric strings are never read as dates or booleans.
    """
    present = [v for v in values if not is_blank(v)]
    if not present:
        return FieldType.TEXT

    if all(is_number(v) for v in present):
        return FieldType.NUMBER
    if all(parse_datetime(v) is not None for v in present):
        return FieldType.DATE
    if all(is_boolean_token(v) for v in present):
        return FieldType.BOOLEAN
    return FieldType.TEXT


def column_values(rows: Sequence[Sequence[Any]], index: int) -> List[Any]:
    return [row[index] if index < len(row) else None for row in rows]


def infer_schema(header_row: Sequence[Any], data_rows: Sequence[Sequence[Any]], sample_rows: int = 0) -> List[TableField]:
    """
    Infer table fields from a header row and data rows.

    Args:
        header_row: Raw header cells
        data_rows: Data rows, each a list of cells in column order
        sample_rows: Only inspect the first N rows, 0 inspects them all

    Returns:
        Fields in column order with 1-based ``order``
    """
    rows = data_rows[:sample_rows] if sample_rows else data_rows

    return [
        TableField(
            name=name,
            label=label,
            type=detect_type(column_values(rows, index)),
            order=index + 1,
        )
        for index, (name, label) in enumerate(normalize_headers(header_row))
    ]


class TypeInference(BaseStage):
    name = "infer_types"

    def process(self, batch: ImportBatch) -> StageResult:
        batch.fields = infer_schema(batch.headers, batch.rows, self.config.get("sample_rows", 0))

        result = StageResult(data=batch.fields)
        result.metadata["types"] = {f.name: f.type.value for f in batch.fields}
        if not batch.rows:
            result.add_warning("No data rows, every column defaults to text")
        return result
