from .memory_store import InMemoryRecordStore
from .sql_store import SQLRecordStore

__all__ = [
    "InMemoryRecordStore",
    "SQLRecordStore",
]
