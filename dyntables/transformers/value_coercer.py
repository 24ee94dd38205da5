import re
from datetime import date, datetime
from typing import Any, Dict, Sequence

from dyntables.core.enums import FieldType, NUMERIC_TYPES, TEXT_LIKE_TYPES
from dyntables.domain.entities.import_batch import ImportBatch
from dyntables.domain.entities.table import TableField
from dyntables.transformers.base_transformer import BaseStage, StageResult
from dyntables.utils.date_utils import excel_serial_to_datetime, is_excel_serial, parse_datetime
from dyntables.utils.validation_utils import IMPORT_BOOLEAN_TOKENS, is_blank, parse_boolean, parse_number

_GROUPED_AMOUNT = re.compile(r"^[+-]?\$?\s?\d{1,3}(,\d{3})+(\.\d+)?$|^[+-]?\$\s?\d+(\.\d+)?$")


def _coerce_number(value: Any) -> Any:
    if isinstance(value, str):
        text = value.strip()
        if _GROUPED_AMOUNT.match(text):
            text = text.replace("$", "").replace(",", "").replace(" ", "")
        number = parse_number(text)
        return value if number is None else number
    return value


def _coerce_date(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return parse_datetime(value).isoformat()

    number = parse_number(value)
    if number is not None and is_excel_serial(number):
        return excel_serial_to_datetime(number).isoformat()

    parsed = parse_datetime(value)
    return value if parsed is None else parsed.isoformat()


def _coerce_boolean(value: Any) -> Any:
    parsed = parse_boolean(value, tokens=IMPORT_BOOLEAN_TOKENS)
    return value if parsed is None else parsed


def _coerce_text(value: Any) -> Any:
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, str):
        return value.strip()
    return value


def coerce_cell(field: TableField, value: Any) -> Any:
    """
    Convert one spreadsheet cell towards the field's type.

    Blank cells become None. Values that cannot be converted are returned
    unchanged so the validator reports them.
    """
    if is_blank(value):
        return None

    if field.type in NUMERIC_TYPES:
        return _coerce_number(value)
    if field.type == FieldType.DATE:
        return _coerce_date(value)
    if field.type == FieldType.BOOLEAN:
        return _coerce_boolean(value)
    if field.type in TEXT_LIKE_TYPES:
        return _coerce_text(value)
    if field.type == FieldType.FILE and isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return value


def coerce_record(fields: Sequence[TableField], data: Dict[str, Any]) -> Dict[str, Any]:
    by_name = {f.name: f for f in fields}
    return {
        key: coerce_cell(by_name[key], value) if key in by_name else value
        for key, value in data.items()
    }


class ValueCoercer(BaseStage):
    name = "coerce_values"

    def process(self, batch: ImportBatch) -> StageResult:
        batch.records = [coerce_record(batch.fields, record) for record in batch.records]
        return StageResult(data=batch.records, metadata={"records": len(batch.records)})
