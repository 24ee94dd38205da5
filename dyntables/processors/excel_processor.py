# ==============================================
# dyntables/processors/excel_processor.py
# ==============================================
import io
import zipfile
from typing import List, Optional, Tuple, Union

import openpyxl
import pandas as pd
from openpyxl.utils.exceptions import InvalidFileException

from dyntables.core.exceptions import ImportProcessingException
from dyntables.processors.base_processor import BaseProcessor, ParsedSheet


class ExcelProcessor(BaseProcessor):
    """
    XLSX reader. Cells keep their native types, so numbers and dates typed
    in the workbook reach type inference as numbers and datetimes.
    """

    def __init__(self, max_rows: Optional[int] = None, **kwargs):
        super().__init__(max_rows=max_rows, **kwargs)
        self.sheet_name: Union[str, int] = kwargs.get('sheet_name') or 0

    async def validate_file_format(self, content: bytes) -> Tuple[bool, str]:
        if not content:
            return False, "File is empty"
        try:
            workbook = openpyxl.load_workbook(io.BytesIO(content), read_only=True)
        except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as e:
            return False, f"Not a valid Excel file: {e}"
        try:
            if len(workbook.sheetnames) == 0:
                return False, "No sheets found in Excel file"
        finally:
            workbook.close()
        return True, ""

    async def list_sheets(self, content: bytes) -> List[str]:
        workbook = openpyxl.load_workbook(io.BytesIO(content), read_only=True)
        try:
            return list(workbook.sheetnames)
        finally:
            workbook.close()

    async def read(self, content: bytes, file_name: Optional[str] = None) -> ParsedSheet:
        is_valid, error = await self.validate_file_format(content)
        if not is_valid:
            raise ImportProcessingException(error, file_name=file_name)

        try:
            frame = pd.read_excel(
                io.BytesIO(content),
                sheet_name=self.sheet_name,
                header=None,
                dtype=object,
                engine="openpyxl",
            )
        except (ValueError, KeyError) as e:
            raise ImportProcessingException(f"Cannot read sheet '{self.sheet_name}': {e}", file_name=file_name)

        sheet = self._frame_to_sheet(frame, file_name, sheet=str(self.sheet_name))
        sheet.sheet_name = str(self.sheet_name)
        self.logger.info(f"Read Excel {file_name or ''}: {sheet.row_count} rows from sheet {self.sheet_name}")
        return sheet
