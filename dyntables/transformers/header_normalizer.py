from typing import Any, List, Sequence, Tuple

from dyntables.domain.entities.import_batch import ImportBatch
from dyntables.transformers.base_transformer import BaseStage, StageResult
from dyntables.utils.text_utils import field_name


def normalize_headers(headers: Sequence[Any]) -> List[Tuple[str, str]]:
    """
    Turn raw spreadsheet headers into unique machine names.

    Args:
        headers: Header cells as read from the file

    Returns:
        One ``(name, label)`` pair per column, in column order
    """
    result: List[Tuple[str, str]] = []
    seen = set()

    for index, header in enumerate(headers, start=1):
        label = "" if header is None else str(header).strip()
        name = field_name(label)

        if not name:
            name = f"campo_{index}"
        if not label:
            label = f"Campo {index}"

        candidate = name
        suffix = 1
        while candidate in seen:
            candidate = f"{name}_{suffix}"
            suffix += 1

        seen.add(candidate)
        result.append((candidate, label))

    return result


class HeaderNormalizer(BaseStage):
    name = "normalize_headers"

    def process(self, batch: ImportBatch) -> StageResult:
        pairs = normalize_headers(batch.headers)
        result = StageResult(data=pairs)

        for raw, (name, _label) in zip(batch.headers, pairs):
            if field_name("" if raw is None else str(raw)) != name:
                result.add_warning(f"Header '{raw}' stored as '{name}'")

        result.metadata["columns"] = len(pairs)
        return result
