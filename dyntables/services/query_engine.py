"""
In-process filtering, search, sorting and pagination of records.

Both record stores delegate to this module so that listings behave the
same whatever the backend.
"""

import re
from collections import Counter
from datetime import date, datetime, timedelta
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from dyntables.core.config import get_settings
from dyntables.core.enums import FieldType, NUMERIC_TYPES, SortDirection, TEXT_LIKE_TYPES
from dyntables.core.logging import get_logger
from dyntables.domain.entities.query import QueryResult, RecordQuery
from dyntables.domain.entities.record import Record
from dyntables.domain.entities.table import Table
from dyntables.utils.date_utils import parse_datetime, utcnow
from dyntables.utils.validation_utils import is_blank, parse_boolean, parse_number

logger = get_logger(__name__)

TIMESTAMP_FIELDS = {
    "created_at": "created_at",
    "createdAt": "created_at",
    "updated_at": "updated_at",
    "updatedAt": "updated_at",
}

# Payload keys searched in addition to text-like fields
BODY_KEYS = ("lastMessage", "last_message", "body", "message", "ultimo_mensaje")

RANGE_KEYS = ("gte", "lte")

_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$|^\d{1,2}/\d{1,2}/\d{4}$")


def _is_range(condition: Any) -> bool:
    return isinstance(condition, dict) and any(k in condition for k in RANGE_KEYS)


def _field_type(table: Optional[Table], key: str) -> Optional[FieldType]:
    if key in TIMESTAMP_FIELDS:
        return FieldType.DATE
    if table is None:
        return FieldType.TEXT
    table_field = table.get_field(key)
    return table_field.type if table_field else None


def _resolve(record: Record, key: str) -> Any:
    return record.get(TIMESTAMP_FIELDS.get(key, key))


def _upper_date_bound(bound: Any) -> Optional[datetime]:
    parsed = parse_datetime(bound)
    if parsed is not None and isinstance(bound, str) and _DATE_ONLY.match(bound.strip()):
        # A bare date as upper bound covers the whole day
        return parsed + timedelta(days=1) - timedelta(microseconds=1)
    return parsed


def _comparable(field_type: FieldType, value: Any) -> Any:
    """Value in the form used for ordering and range checks, None if unusable."""
    if is_blank(value):
        return None
    if field_type == FieldType.DATE:
        return parse_datetime(value)
    if field_type in NUMERIC_TYPES:
        number = parse_number(value)
        return None if number is None else float(number)
    if field_type == FieldType.BOOLEAN:
        return parse_boolean(value)
    if isinstance(value, (list, tuple)):
        value = ", ".join(str(item) for item in value)
    return str(value).strip().lower()


def _matches_range(field_type: FieldType, value: Any, condition: Dict[str, Any]) -> bool:
    actual = _comparable(field_type, value)
    if actual is None:
        return False

    lower, upper = condition.get("gte"), condition.get("lte")

    if not is_blank(lower):
        bound = _comparable(field_type, lower)
        if bound is None or actual < bound:
            return False

    if not is_blank(upper):
        bound = _upper_date_bound(upper) if field_type == FieldType.DATE else _comparable(field_type, upper)
        if bound is None or actual > bound:
            return False

    return True


def _matches_exact(field_type: FieldType, value: Any, expected: Any) -> bool:
    if isinstance(expected, (list, tuple)):
        return any(_matches_exact(field_type, value, option) for option in expected)

    if isinstance(value, (list, tuple)):
        return any(_matches_exact(field_type, item, expected) for item in value)

    if field_type == FieldType.DATE:
        actual, wanted = parse_datetime(value), parse_datetime(expected)
        if actual is None or wanted is None:
            return False
        if isinstance(expected, str) and _DATE_ONLY.match(expected.strip()):
            return actual.date() == wanted.date()
        return actual == wanted

    actual, wanted = _comparable(field_type, value), _comparable(field_type, expected)
    return actual is not None and actual == wanted


def apply_filters(records: Sequence[Record], filters: Dict[str, Any], table: Optional[Table] = None) -> List[Record]:
    """Keep the records matching every filter. Unknown and blank filters are ignored."""
    checks: List[Tuple[str, FieldType, Any]] = []

    for key, condition in (filters or {}).items():
        if is_blank(condition) or condition == {}:
            continue
        if _is_range(condition) and all(is_blank(condition.get(k)) for k in RANGE_KEYS):
            continue
        if isinstance(condition, dict) and not _is_range(condition):
            logger.debug(f"Ignoring filter on '{key}' with unsupported operators {sorted(condition)}")
            continue

        field_type = _field_type(table, key)
        if field_type is None:
            logger.debug(f"Ignoring filter on unknown field '{key}'")
            continue
        checks.append((key, field_type, condition))

    def matches(record: Record) -> bool:
        for key, field_type, condition in checks:
            value = _resolve(record, key)
            if _is_range(condition):
                if not _matches_range(field_type, value, condition):
                    return False
            elif not _matches_exact(field_type, value, condition):
                return False
        return True

    return [r for r in records if matches(r)]


def _search_values(record: Record, table: Optional[Table]) -> List[str]:
    values: List[Any] = []

    if table is None:
        values.extend(v for v in record.data.values() if isinstance(v, str))
    else:
        values.extend(record.data.get(f.name) for f in table.fields if f.type in TEXT_LIKE_TYPES)

    for key in BODY_KEYS:
        payload = record.data.get(key)
        if isinstance(payload, dict):
            payload = payload.get("body")
        values.append(payload)

    return [str(v).lower() for v in values if not is_blank(v) and not isinstance(v, (dict, list))]


def apply_search(records: Sequence[Record], search: Optional[str], table: Optional[Table] = None) -> List[Record]:
    """Case-insensitive substring search over text-like fields and message bodies."""
    term = (search or "").strip().lower()
    if not term:
        return list(records)
    return [r for r in records if any(term in v for v in _search_values(r, table))]


def _sort_key_factory(sort_field: str, table: Optional[Table]) -> Tuple[str, Callable[[Record], Any]]:
    field_type = _field_type(table, sort_field)
    if field_type is None:
        logger.debug(f"Unknown sort field '{sort_field}', sorting by created_at")
        sort_field, field_type = "created_at", FieldType.DATE

    return sort_field, lambda record: _comparable(field_type, _resolve(record, sort_field))


def apply_sort(records: Sequence[Record], sort_field: str, sort_dir: SortDirection, table: Optional[Table] = None) -> List[Record]:
    """Single-field sort. Records missing the value go last in either direction."""
    _, key = _sort_key_factory(sort_field or "created_at", table)

    present, missing = [], []
    for record in records:
        (missing if key(record) is None else present).append(record)

    present.sort(key=key, reverse=SortDirection(sort_dir) == SortDirection.DESC)
    return present + missing


def paginate(records: Sequence[Record], page: int, page_size: int) -> List[Record]:
    start = (page - 1) * page_size
    return list(records[start:start + page_size])


def daily_counts(timestamps: Iterable[datetime], days: int, now: Optional[datetime] = None) -> List[Tuple[date, int]]:
    """
    Count timestamps per calendar day over the last ``days`` days.

    Returns one entry per day, oldest first, including days with no records.
    """
    today = (now or utcnow()).date()
    window = [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]
    counts = Counter(ts.date() for ts in timestamps)
    return [(day, counts.get(day, 0)) for day in window]


def query(records: Sequence[Record],
          record_query: RecordQuery,
          table: Optional[Table] = None,
          max_page_size: Optional[int] = None) -> QueryResult:
    """
    Filter, search, sort and paginate records.

    Args:
        records: Every record of the table
        record_query: Query parameters
        table: Table of the records, drives type-aware comparisons
        max_page_size: Upper bound for the page size, defaults to settings

    Returns:
        QueryResult with the requested page and the filtered total
    """
    limit = max_page_size or get_settings().max_page_size
    page_size = min(record_query.page_size, limit)

    matched = apply_filters(records, record_query.filters, table)
    matched = apply_search(matched, record_query.search, table)
    ordered = apply_sort(matched, record_query.sort_field, record_query.sort_dir, table)

    return QueryResult(
        records=paginate(ordered, record_query.page, page_size),
        total=len(ordered),
        page=record_query.page,
        page_size=page_size,
    )
