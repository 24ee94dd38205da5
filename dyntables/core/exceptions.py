from typing import Any, Dict, List, Optional, Union

from starlette.status import HTTP_400_BAD_REQUEST


class AppException(Exception):
    def __init__(self, message: str,
                 error_code: Optional[str] = None,
                 status_code: int = HTTP_400_BAD_REQUEST,
                 details: Optional[Dict[str, Any]] = None,):
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"{self.status_code}: {self.message}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message='{self.message}', status_code={self.status_code})"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class RecordValidationError(AppException):
    """Raised when record data does not conform to its table schema."""

    def __init__(
        self,
        field_errors: List[Any],
        message: str = "Validation failed",
        details: Optional[Dict[str, Any]] = None,
    ):
        self.field_errors = list(field_errors)

        exception_details = details or {}
        exception_details["field_errors"] = [error.to_dict() for error in self.field_errors]

        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            details=exception_details,
            status_code=422,
        )


class NotFoundError(AppException):
    """Exception raised when a resource is not found."""

    def __init__(
        self,
        resource: str = "Resource",
        resource_id: Optional[Union[str, int]] = None,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.resource = resource
        self.resource_id = resource_id

        if not message:
            if resource_id:
                message = f"{resource} with ID '{resource_id}' not found"
            else:
                message = f"{resource} not found"

        exception_details = details or {}
        exception_details.update({
            "resource": resource,
            "resource_id": resource_id,
        })

        super().__init__(
            message=message,
            error_code="NOT_FOUND",
            details=exception_details,
            status_code=404,
        )


class ConflictError(AppException):
    """Exception raised when there's a conflict with current state."""

    def __init__(
        self,
        message: str = "Conflict with current state",
        resource: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.resource = resource

        exception_details = details or {}
        if resource:
            exception_details["resource"] = resource

        super().__init__(
            message=message,
            error_code="CONFLICT",
            details=exception_details,
            status_code=409,
        )


class BadRequestError(AppException):
    """Exception raised for bad requests."""

    def __init__(
        self,
        message: str = "Bad request",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            error_code="BAD_REQUEST",
            details=details,
            status_code=400,
        )


class SchemaDefinitionError(AppException):
    """Raised when a table definition is inconsistent (duplicate field names, bad slug)."""

    def __init__(
        self,
        message: str = "Invalid table definition",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            error_code="INVALID_SCHEMA",
            details=details,
            status_code=400,
        )


class SerializationError(AppException):
    """Raised for unsupported export formats or values that cannot be rendered."""

    def __init__(
        self,
        message: str = "Serialization failed",
        export_format: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.export_format = export_format

        exception_details = details or {}
        if export_format:
            exception_details["format"] = export_format

        super().__init__(
            message=message,
            error_code="SERIALIZATION_ERROR",
            details=exception_details,
            status_code=400,
        )


class ImportProcessingException(AppException):
    """Raised when an uploaded spreadsheet cannot be read."""

    def __init__(
        self,
        message: str = "Import failed",
        file_name: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.file_name = file_name

        exception_details = details or {}
        if file_name:
            exception_details["file_name"] = file_name

        super().__init__(
            message=message,
            error_code="IMPORT_ERROR",
            details=exception_details,
            status_code=400,
        )


class DatabaseError(AppException):
    """Exception raised for database-related errors."""

    def __init__(
        self,
        message: str = "Database error occurred",
        operation: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.operation = operation

        exception_details = details or {}
        if operation:
            exception_details["operation"] = operation

        super().__init__(
            message=message,
            error_code="DATABASE_ERROR",
            details=exception_details,
            status_code=500,
        )
