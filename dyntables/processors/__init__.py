# ==============================================
# dyntables/processors/__init__.py
# ==============================================
from pathlib import PurePath

from dyntables.core.exceptions import ImportProcessingException

from .base_processor import BaseProcessor, ParsedSheet
from .csv_processor import CSVProcessor
from .excel_processor import ExcelProcessor
from .json_processor import JSONProcessor

# Processor registry for dynamic instantiation
PROCESSOR_REGISTRY = {
    'csv': CSVProcessor,
    'text/csv': CSVProcessor,
    'application/csv': CSVProcessor,
    'txt': CSVProcessor,

    'excel': ExcelProcessor,
    'xlsx': ExcelProcessor,
    'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet': ExcelProcessor,

    'json': JSONProcessor,
    'application/json': JSONProcessor,
    'text/json': JSONProcessor,
}


def get_processor(file_type: str, **kwargs) -> BaseProcessor:
    """
    Factory function to get appropriate processor based on file type

    Args:
        file_type: File extension or MIME type
        **kwargs: Additional arguments to pass to processor

    Returns:
        Processor instance

    Raises:
        ImportProcessingException: If file type is not supported
    """
    key = (file_type or '').lower().lstrip('.')
    processor_class = PROCESSOR_REGISTRY.get(key)

    if not processor_class:
        raise ImportProcessingException(
            f"Unsupported file type: {file_type}",
            details={"supported_types": get_supported_types()},
        )

    return processor_class(**kwargs)


def processor_for_file(file_name: str, content_type: str = None, **kwargs) -> BaseProcessor:
    """Pick a processor from the file extension, falling back to the MIME type."""
    extension = PurePath(file_name or '').suffix.lower().lstrip('.')
    if is_supported_type(extension):
        return get_processor(extension, **kwargs)
    return get_processor(content_type or extension, **kwargs)


def get_supported_types():
    """Get list of all supported file types"""
    return list(PROCESSOR_REGISTRY.keys())


def is_supported_type(file_type: str) -> bool:
    """Check if file type is supported"""
    return (file_type or '').lower().lstrip('.') in PROCESSOR_REGISTRY


__all__ = [
    "BaseProcessor",
    "ParsedSheet",
    "CSVProcessor",
    "ExcelProcessor",
    "JSONProcessor",
    "get_processor",
    "processor_for_file",
    "get_supported_types",
    "is_supported_type",
    "PROCESSOR_REGISTRY",
]
