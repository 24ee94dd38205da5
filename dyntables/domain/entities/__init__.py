from .table import Table, TableField
from .record import Record
from .query import RecordQuery, QueryResult
from .import_batch import ImportBatch, ImportReport

__all__ = [
    "Table",
    "TableField",
    "Record",
    "RecordQuery",
    "QueryResult",
    "ImportBatch",
    "ImportReport",
]
