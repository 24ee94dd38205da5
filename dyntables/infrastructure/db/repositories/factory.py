from typing import Optional

from dyntables.core.config import get_settings
from dyntables.core.enums import StoreBackend
from dyntables.core.logging import get_logger
from dyntables.domain.repositories.record_store import RecordStore

from .memory_store import InMemoryRecordStore
from .sql_store import SQLRecordStore

logger = get_logger(__name__)

_default_store: Optional[RecordStore] = None


def create_store(backend: Optional[str] = None) -> RecordStore:
    """
    Build a record store for the configured backend

    Raises:
        ValueError: If the backend is unknown
    """
    backend = StoreBackend(backend or get_settings().store_backend)
    if backend == StoreBackend.MEMORY:
        return InMemoryRecordStore()
    return SQLRecordStore()


def get_default_store() -> RecordStore:
    """Process-wide store shared by the API and the import worker."""
    global _default_store
    if _default_store is None:
        _default_store = create_store()
        logger.info(f"Using {type(_default_store).__name__}")
    return _default_store


def set_default_store(store: Optional[RecordStore]) -> None:
    global _default_store
    _default_store = store
