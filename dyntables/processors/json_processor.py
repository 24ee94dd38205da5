# ==============================================
# dyntables/processors/json_processor.py
# ==============================================
import json
from typing import Any, Dict, List, Optional, Tuple

from dyntables.core.exceptions import ImportProcessingException
from dyntables.processors.base_processor import BaseProcessor, ParsedSheet


class JSONProcessor(BaseProcessor):
    """
    Reads a JSON array of objects, or a record export
    (``{"records": [{"data": {...}}, ...]}``), into header and rows.
    """

    async def validate_file_format(self, content: bytes) -> Tuple[bool, str]:
        try:
            self._load(content)
        except (ValueError, UnicodeDecodeError) as e:
            return False, f"Invalid JSON: {e}"
        return True, ""

    def _load(self, content: bytes) -> Any:
        return json.loads(content.decode("utf-8-sig"))

    def _extract_objects(self, payload: Any) -> List[Dict[str, Any]]:
        if isinstance(payload, dict):
            payload = payload.get("records", payload.get("data"))

        if not isinstance(payload, list):
            raise ValueError("Expected an array of objects or an object with a 'records' array")

        objects = []
        for item in payload:
            if not isinstance(item, dict):
                raise ValueError("Every entry must be an object")
            data = item.get("data") if isinstance(item.get("data"), dict) else item
            objects.append(data)
        return objects

    async def read(self, content: bytes, file_name: Optional[str] = None) -> ParsedSheet:
        try:
            objects = self._extract_objects(self._load(content))
        except (ValueError, UnicodeDecodeError) as e:
            raise ImportProcessingException(f"Invalid JSON file: {e}", file_name=file_name)

        headers: List[str] = []
        for obj in objects:
            for key in obj:
                if key not in headers:
                    headers.append(key)

        if not headers:
            raise ImportProcessingException("File contains no rows", file_name=file_name)

        rows = [[obj.get(key) for key in headers] for obj in objects]
        self._check_row_limit(len(rows), file_name)
        self.logger.info(f"Read JSON {file_name or ''}: {len(rows)} rows")
        return ParsedSheet(headers=list(headers), rows=rows, file_name=file_name)
