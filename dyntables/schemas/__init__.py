from .base import BulkOperationResponse, ErrorDetail, ErrorResponse, HealthCheckSchema
from .table_schemas import (
    DuplicateTableRequest,
    FieldSchema,
    StructureUpdate,
    TableCreate,
    TableResponse,
    TableStatsResponse,
    TableStructureResponse,
    TableUpdate,
)
from .record_schemas import (
    AddFieldRequest,
    BulkDeleteRequest,
    BulkUpdateRequest,
    DeleteFieldsRequest,
    RecordCreate,
    RecordListResponse,
    RecordResponse,
    RecordSearchRequest,
    RecordUpdate,
    RecordValidateRequest,
    ValidationResponse,
)
from .import_schemas import (
    CreateTableFromRowsRequest,
    CreateTableImportResponse,
    ImportRecordsRequest,
    ImportReportResponse,
    ImportRowsRequest,
    ImportTaskResponse,
    InferRequest,
)
