from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from dyntables.domain.entities.import_batch import ImportBatch
from dyntables.transformers.base_transformer import BaseStage, StageResult
from dyntables.utils.validation_utils import is_blank


@dataclass
class DedupResult:
    unique: List[Dict[str, Any]]
    removed_count: int
    original_count: int
    # Per field, how many dropped rows had a value in it
    duplicate_fields: Dict[str, int] = field(default_factory=dict)

    @property
    def final_count(self) -> int:
        return len(self.unique)


def _key_part(value: Any) -> str:
    if is_blank(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip().lower()


def composite_key(record: Dict[str, Any], key_fields: Sequence[str]) -> Tuple[str, ...]:
    return tuple(_key_part(record.get(name)) for name in key_fields)


def dedup(
    records: Sequence[Dict[str, Any]],
    fields: Sequence[Any],
    key_fields: Optional[Sequence[str]] = None,
) -> DedupResult:
    """
    Drop records whose composite key was already seen.

    The first occurrence wins and order is preserved. Records whose key
    parts are all blank are never treated as duplicates.

    Args:
        records: Record data maps
        fields: Table fields (or field names) of the records
        key_fields: Subset of field names forming the key, all fields when empty
    """
    names = [f if isinstance(f, str) else f.name for f in fields]
    keys = list(key_fields) if key_fields else names

    seen = set()
    unique: List[Dict[str, Any]] = []
    duplicate_fields: Dict[str, int] = {}

    for record in records:
        key = composite_key(record, keys)
        if not any(key):
            unique.append(record)
            continue

        if key in seen:
            for name in names:
                if not is_blank(record.get(name)):
                    duplicate_fields[name] = duplicate_fields.get(name, 0) + 1
            continue

        seen.add(key)
        unique.append(record)

    return DedupResult(
        unique=unique,
        removed_count=len(records) - len(unique),
        original_count=len(records),
        duplicate_fields=duplicate_fields,
    )


class Deduplicator(BaseStage):
    name = "dedup"

    def process(self, batch: ImportBatch) -> StageResult:
        outcome = dedup(batch.records, batch.fields, self.config.get("key_fields"))

        kept = {id(record) for record in outcome.unique}
        if batch.row_numbers:
            batch.row_numbers = [
                number for number, record in zip(batch.row_numbers, batch.records) if id(record) in kept
            ]
        batch.records = outcome.unique
        batch.duplicates_removed = outcome.removed_count
        batch.duplicate_fields = outcome.duplicate_fields
        batch.final_count = outcome.final_count

        result = StageResult(data=outcome)
        result.metadata.update({
            "original_count": outcome.original_count,
            "final_count": outcome.final_count,
            "duplicates_removed": outcome.removed_count,
        })
        if outcome.removed_count:
            result.add_warning(f"{outcome.removed_count} duplicate rows removed")
        return result
