import io
import re
from typing import Any, Sequence

import pandas as pd
from openpyxl.utils import get_column_letter

from dyntables.core.enums import FieldType, NUMERIC_TYPES
from dyntables.core.exceptions import SerializationError
from dyntables.domain.entities.record import Record
from dyntables.domain.entities.table import Table, TableField
from dyntables.serializers.base_serializer import BaseSerializer
from dyntables.serializers.formatting import format_boolean, format_date, format_file
from dyntables.utils.date_utils import parse_datetime
from dyntables.utils.validation_utils import is_blank, parse_number

MAX_SHEET_NAME = 31
_INVALID_SHEET_CHARS = re.compile(r"[\[\]:*?/\\]")


def sheet_title(name: str) -> str:
    """Excel sheet names are limited to 31 characters and forbid []:*?/\\"""
    cleaned = _INVALID_SHEET_CHARS.sub("", name or "").strip("'").strip()
    return cleaned[:MAX_SHEET_NAME] or "Sheet1"


class ExcelSerializer(BaseSerializer):
    """One-sheet XLSX workbook. Numbers and dates are written as native cells."""

    format_name = "excel"
    extension = "xlsx"
    media_type = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

    def _cell(self, table_field: TableField, value: Any) -> Any:
        if value is None or (is_blank(value) and not isinstance(value, list)):
            return ""
        if table_field.type in NUMERIC_TYPES:
            number = parse_number(value)
            return value if number is None else number
        if table_field.type == FieldType.DATE:
            parsed = parse_datetime(value)
            return str(value) if parsed is None else parsed
        if table_field.type == FieldType.BOOLEAN:
            return format_boolean(value, self.options.true_label, self.options.false_label)
        if table_field.type == FieldType.FILE:
            return format_file(value)
        return str(value)

    def serialize(self, table: Table, records: Sequence[Record]) -> bytes:
        columns = self.columns(table)
        headers = self.headers(table)

        rows = []
        for record in records:
            row = [self._cell(f, record.data.get(f.name)) for f in columns]
            row.append(format_date(record.created_at, self.options.date_format))
            rows.append(row)

        frame = pd.DataFrame(rows, columns=headers)
        title = sheet_title(table.name)
        buffer = io.BytesIO()

        try:
            with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
                frame.to_excel(writer, sheet_name=title, index=False)
                worksheet = writer.sheets[title]
                for index, table_field in enumerate(columns, start=1):
                    if table_field.width:
                        # Display widths are pixels, openpyxl wants characters
                        worksheet.column_dimensions[get_column_letter(index)].width = max(table_field.width // 7, 8)
        except (ValueError, TypeError) as e:
            raise SerializationError(f"Cannot render Excel file: {e}", export_format=self.format_name)

        return buffer.getvalue()
