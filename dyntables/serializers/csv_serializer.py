import csv
import io
from typing import Sequence

from dyntables.domain.entities.record import Record
from dyntables.domain.entities.table import Table
from dyntables.serializers.base_serializer import BaseSerializer
from dyntables.serializers.formatting import format_date, format_value


class CSVSerializer(BaseSerializer):
    """RFC 4180 CSV, UTF-8 with BOM so spreadsheet apps detect the encoding."""

    format_name = "csv"
    extension = "csv"
    media_type = "text/csv; charset=utf-8"

    def serialize(self, table: Table, records: Sequence[Record]) -> bytes:
        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\r\n")
        writer.writerow(self.headers(table))

        columns = self.columns(table)
        for record in records:
            row = [format_value(record.data.get(f.name), f.type, self.options) for f in columns]
            row.append(format_date(record.created_at, self.options.date_format))
            writer.writerow(row)

        return buffer.getvalue().encode("utf-8-sig")
