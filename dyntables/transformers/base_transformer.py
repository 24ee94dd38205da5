# ==============================================
# dyntables/transformers/base_transformer.py
# ==============================================
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from dyntables.core.enums import StageStatus
from dyntables.core.logging import get_logger
from dyntables.domain.entities.import_batch import ImportBatch
from dyntables.utils.date_utils import utcnow

logger = get_logger(__name__)


class StageResult:
    """Result object for one import pipeline stage"""

    def __init__(self,
                 status: StageStatus = StageStatus.SUCCESS,
                 data: Any = None,
                 errors: Optional[List[Any]] = None,
                 warnings: Optional[List[str]] = None,
                 metadata: Optional[Dict[str, Any]] = None):
        self.status = status
        self.data = data
        self.errors = errors or []
        self.warnings = warnings or []
        self.metadata = metadata or {}
        self.timestamp = utcnow()

    def is_success(self) -> bool:
        return self.status == StageStatus.SUCCESS

    def is_failed(self) -> bool:
        return self.status == StageStatus.FAILED

    def has_warnings(self) -> bool:
        return len(self.warnings) > 0

    def add_error(self, error: Any):
        self.errors.append(error)
        self.status = StageStatus.FAILED

    def add_warning(self, warning: str):
        self.warnings.append(warning)
        if self.status == StageStatus.SUCCESS:
            self.status = StageStatus.WARNING

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "errors": [e.to_dict() if hasattr(e, "to_dict") else e for e in self.errors],
            "warnings": self.warnings,
            "metadata": self.metadata,
            "timestamp": self.timestamp.isoformat(),
        }


class BaseStage(ABC):
    """
    Abstract base class for import pipeline stages.
    A stage reads an ImportBatch, updates it in place and reports a StageResult.
    """

    name = "stage"

    def __init__(self, **kwargs):
        self.logger = logger
        self.config = kwargs

    @abstractmethod
    def process(self, batch: ImportBatch) -> StageResult:
        """
        Run the stage over a batch

        Args:
            batch: Import batch to update

        Returns:
            StageResult describing what the stage did
        """
        pass

    def __call__(self, batch: ImportBatch) -> StageResult:
        result = self.process(batch)
        result.metadata.setdefault("stage", self.name)
        self.logger.debug(f"Stage {self.name} finished with status {result.status.value}")
        return result
