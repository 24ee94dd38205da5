import functools
import inspect
import json
import logging
import logging.handlers
import sys
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import get_settings

# Record attributes copied into JSON output when a log call passes them via ``extra``
CONTEXT_FIELDS = ("tenant", "table_slug", "record_id", "task_id", "request_id", "audit")

AUDIT_LOGGER = "dyntables.audit"


class JSONFormatter(logging.Formatter):
    """One JSON object per line, with the tenant/table context when present."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}:{record.funcName}:{record.lineno}",
        }
        for key in CONTEXT_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                entry[key] = value

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str, ensure_ascii=False)


def _build_handlers(formatter: logging.Formatter) -> List[logging.Handler]:
    log_settings = get_settings().logging

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(formatter)
    handlers: List[logging.Handler] = [console]

    if log_settings.file_path:
        path = Path(log_settings.file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        rotating = logging.handlers.RotatingFileHandler(
            filename=path,
            maxBytes=log_settings.max_bytes,
            backupCount=log_settings.backup_count,
            encoding="utf-8",
        )
        rotating.setFormatter(formatter)
        handlers.append(rotating)

    return handlers


def setup_logging() -> None:
    """Configure the root logger for the API and the import worker."""
    settings = get_settings()

    if settings.logging.json_format:
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(fmt=settings.logging.format, datefmt="%Y-%m-%d %H:%M:%S")

    root = logging.getLogger()
    root.setLevel(getattr(logging, settings.logging.level.upper(), logging.INFO))
    for handler in list(root.handlers):
        root.removeHandler(handler)
    for handler in _build_handlers(formatter):
        root.addHandler(handler)

    logging.getLogger("uvicorn.access").setLevel(logging.INFO)
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.database_echo else logging.WARNING
    )
    # openpyxl warns on every workbook with data validation or styles it skips
    logging.getLogger("openpyxl").setLevel(logging.ERROR)
    if settings.is_production:
        logging.getLogger("celery").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_execution_time(logger: logging.Logger, level: int = logging.INFO):
    """
    Decorator logging how long a call took, or how long it ran before
    failing. Coroutine functions are awaited.
    """
    def report(func, started: float, error: Optional[Exception] = None) -> None:
        elapsed = time.perf_counter() - started
        if error is None:
            logger.log(level, f"{func.__qualname__} took {elapsed:.3f}s")
        else:
            logger.error(f"{func.__qualname__} failed after {elapsed:.3f}s: {error}")

    def decorator(func):
        if inspect.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs):
                started = time.perf_counter()
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    report(func, started, e)
                    raise
                report(func, started)
                return result

            return async_wrapper

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            started = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                report(func, started, e)
                raise
            report(func, started)
            return result

        return wrapper
    return decorator


def audit_log(
    action: str,
    resource: str,
    tenant: Optional[str] = None,
    user_id: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Log a mutation of a table or its records.

    Args:
        action: CREATE, UPDATE, DELETE, BULK_DELETE or IMPORT
        resource: TABLE or RECORD
        tenant: Company the resource belongs to
        user_id: User from the ``X-User-Id`` header, if any
        details: Slugs, ids and counts of the change
    """
    details = details or {}
    logging.getLogger(AUDIT_LOGGER).info(
        f"{action} {resource} by {user_id or 'anonymous'}",
        extra={
            "tenant": tenant,
            "table_slug": details.get("table_slug") or details.get("slug"),
            "record_id": details.get("record_id"),
            "audit": {"action": action, "resource": resource, "user_id": user_id, "details": details},
        },
    )
