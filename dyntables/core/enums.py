from enum import Enum


class FieldType(str, Enum):
    """Column types a table field can declare"""
    TEXT = "text"
    EMAIL = "email"
    NUMBER = "number"
    DATE = "date"
    BOOLEAN = "boolean"
    SELECT = "select"
    CURRENCY = "currency"
    FILE = "file"


# Field types whose values take part in free-text search
TEXT_LIKE_TYPES = (FieldType.TEXT, FieldType.EMAIL, FieldType.SELECT)

NUMERIC_TYPES = (FieldType.NUMBER, FieldType.CURRENCY)


class FieldErrorReason(str, Enum):
    """Reasons a field value can be rejected"""
    MISSING_REQUIRED = "MISSING_REQUIRED"
    UNKNOWN_FIELD = "UNKNOWN_FIELD"
    INVALID_NUMBER = "INVALID_NUMBER"
    INVALID_BOOLEAN = "INVALID_BOOLEAN"
    INVALID_DATE = "INVALID_DATE"
    INVALID_FILE = "INVALID_FILE"
    INVALID_TEXT = "INVALID_TEXT"
    INVALID_EMAIL = "INVALID_EMAIL"
    INVALID_OPTION = "INVALID_OPTION"


class ExportFormat(str, Enum):
    CSV = "csv"
    JSON = "json"
    EXCEL = "excel"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class StageStatus(str, Enum):
    """Outcome of one import pipeline stage"""
    SUCCESS = "success"
    WARNING = "warning"
    FAILED = "failed"


class ImportStatus(str, Enum):
    """Status of a background import"""
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class StoreBackend(str, Enum):
    MEMORY = "memory"
    SQL = "sql"
