from .base import BaseModel
from .dynamic_table import DynamicTableModel
from .dynamic_record import DynamicRecordModel

__all__ = [
    "BaseModel",
    "DynamicTableModel",
    "DynamicRecordModel",
]
