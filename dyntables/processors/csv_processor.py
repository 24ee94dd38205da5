# ==============================================
# dyntables/processors/csv_processor.py
# ==============================================
import csv
import io
from typing import Optional, Tuple

import chardet
import pandas as pd

from dyntables.core.exceptions import ImportProcessingException
from dyntables.processors.base_processor import BaseProcessor, ParsedSheet


class CSVProcessor(BaseProcessor):
    """
    CSV reader with encoding and delimiter detection.
    Every cell is read as text so that type inference sees the raw values.
    """

    def __init__(self, max_rows: Optional[int] = None, **kwargs):
        super().__init__(max_rows=max_rows, **kwargs)
        self.encoding = kwargs.get('encoding')
        self.delimiter = kwargs.get('delimiter')
        self.delimiter_candidates = kwargs.get('delimiter_candidates', [',', ';', '\t', '|'])

    async def validate_file_format(self, content: bytes) -> Tuple[bool, str]:
        if not content or not content.strip():
            return False, "File is empty"
        try:
            self._decode(content)
        except UnicodeDecodeError as e:
            return False, f"Cannot decode file: {e}"
        return True, ""

    async def read(self, content: bytes, file_name: Optional[str] = None) -> ParsedSheet:
        is_valid, error = await self.validate_file_format(content)
        if not is_valid:
            raise ImportProcessingException(error, file_name=file_name)

        text, encoding = self._decode(content)
        delimiter = self._detect_delimiter(text)

        try:
            frame = pd.read_csv(
                io.StringIO(text),
                sep=delimiter,
                header=None,
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=False,
            )
        except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
            raise ImportProcessingException(f"Invalid CSV file: {e}", file_name=file_name)

        frame = frame.replace({"": None})
        sheet = self._frame_to_sheet(frame, file_name, encoding=encoding, delimiter=delimiter)
        self.logger.info(
            f"Read CSV {file_name or ''}: {sheet.row_count} rows, encoding {encoding}, delimiter '{delimiter}'"
        )
        return sheet

    def _decode(self, content: bytes) -> Tuple[str, str]:
        """
        Auto-detect file encoding and decode

        Returns:
            Decoded text and the encoding used
        """
        if self.encoding:
            return content.decode(self.encoding), self.encoding

        if content.startswith(b"\xef\xbb\xbf"):
            return content.decode("utf-8-sig"), "utf-8-sig"

        try:
            return content.decode("utf-8"), "utf-8"
        except UnicodeDecodeError:
            pass

        detected = chardet.detect(content[:10000])
        encoding = detected.get('encoding') or 'latin-1'
        self.logger.info(f"Detected encoding: {encoding} (confidence: {detected.get('confidence', 0)})")
        return content.decode(encoding, errors="replace"), encoding

    def _detect_delimiter(self, text: str) -> str:
        """
        Auto-detect CSV delimiter

        Returns:
            Detected delimiter character
        """
        if self.delimiter:
            return self.delimiter

        sample_text = "\n".join(text.splitlines()[:5])

        try:
            dialect = csv.Sniffer().sniff(sample_text, delimiters=''.join(self.delimiter_candidates))
            return dialect.delimiter
        except csv.Error:
            pass

        # Fallback: count occurrences in the header line
        header_line = sample_text.split("\n", 1)[0]
        delimiter_counts = {d: header_line.count(d) for d in self.delimiter_candidates if header_line.count(d)}
        if delimiter_counts:
            return max(delimiter_counts, key=delimiter_counts.get)

        return ','
