"""
Base service class providing common functionality for all services.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from dyntables.core.config import Settings, get_settings
from dyntables.core.logging import get_logger
from dyntables.domain.repositories.record_store import RecordStore


class BaseService(ABC):
    """Base class for all services. The record store is injected."""

    def __init__(self, store: RecordStore, settings: Optional[Settings] = None):
        self.store = store
        self.settings = settings or get_settings()
        self.logger = get_logger(self.__class__.__name__)

    def log_operation(self, operation: str, details: Optional[Dict[str, Any]] = None) -> None:
        """Log service operation."""
        log_msg = f"Service operation: {operation}"
        if details:
            log_msg += f" - Details: {details}"
        self.logger.info(log_msg)

    @abstractmethod
    def get_service_name(self) -> str:
        """Return the service name."""
        pass
