# ==============================================
# dyntables/processors/base_processor.py
# ==============================================
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from dyntables.core.exceptions import ImportProcessingException
from dyntables.core.logging import get_logger
from dyntables.utils.validation_utils import is_blank

logger = get_logger(__name__)


@dataclass
class ParsedSheet:
    """Header row and data rows read from an uploaded file."""

    headers: List[Any]
    rows: List[List[Any]]
    file_name: Optional[str] = None
    sheet_name: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def row_count(self) -> int:
        return len(self.rows)


class BaseProcessor(ABC):
    """
    Abstract base class for spreadsheet readers.
    A processor turns uploaded bytes into a header row and positional data rows.
    """

    def __init__(self, max_rows: Optional[int] = None, **kwargs):
        """
        Initialize base processor

        Args:
            max_rows: Reject files with more data rows than this
            **kwargs: Processor specific options
        """
        self.max_rows = max_rows
        self.logger = logger
        self.config = kwargs

    @abstractmethod
    async def read(self, content: bytes, file_name: Optional[str] = None) -> ParsedSheet:
        """
        Read a file

        Args:
            content: Raw file bytes
            file_name: Original file name, used in messages

        Returns:
            ParsedSheet with the header row and data rows
        """
        pass

    @abstractmethod
    async def validate_file_format(self, content: bytes) -> Tuple[bool, str]:
        """
        Validate if file format is correct for this processor

        Returns:
            Tuple of (is_valid, error_message)
        """
        pass

    def _clean_cell(self, value: Any) -> Any:
        """Convert pandas scalars into plain Python values."""
        if value is None:
            return None
        if isinstance(value, float) and math.isnan(value):
            return None
        if value is pd.NaT or value is pd.NA:
            return None
        if isinstance(value, pd.Timestamp):
            return value.to_pydatetime()
        if isinstance(value, (datetime, date, str, bool, int, float)):
            return value
        if hasattr(value, "item"):
            # numpy scalar
            return value.item()
        return value

    def _frame_to_sheet(self, frame: pd.DataFrame, file_name: Optional[str], **metadata) -> ParsedSheet:
        """Split a header-less frame into its first row and the data rows."""
        if frame.empty:
            raise ImportProcessingException("File contains no rows", file_name=file_name)

        values = [[self._clean_cell(v) for v in row] for row in frame.itertuples(index=False, name=None)]

        # Only leading and trailing blank rows go, inner ones keep their row number
        while values and all(is_blank(v) for v in values[0]):
            values.pop(0)
        while values and all(is_blank(v) for v in values[-1]):
            values.pop()
        if not values:
            raise ImportProcessingException("File contains no rows", file_name=file_name)

        headers, rows = values[0], values[1:]

        # Drop trailing columns that are blank in the header and every row
        while headers and headers[-1] is None and all(r[-1] is None for r in rows):
            headers = headers[:-1]
            rows = [r[:-1] for r in rows]

        self._check_row_limit(len(rows), file_name)
        return ParsedSheet(headers=headers, rows=rows, file_name=file_name, metadata=metadata)

    def _check_row_limit(self, row_count: int, file_name: Optional[str]) -> None:
        if self.max_rows and row_count > self.max_rows:
            raise ImportProcessingException(
                f"File has {row_count} rows, the limit is {self.max_rows}",
                file_name=file_name,
                details={"rows": row_count, "max_rows": self.max_rows},
            )
