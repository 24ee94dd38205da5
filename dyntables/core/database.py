from typing import Optional

from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine

from dyntables.core.config import get_settings
from dyntables.core.logging import get_logger

logger = get_logger(__name__)

_engine: Optional[Engine] = None


def build_engine(database_url: str, echo: bool = False) -> Engine:
    connect_args = {}
    if database_url.startswith("sqlite"):
        # The API and the import worker share connections across threads
        connect_args["check_same_thread"] = False
    return create_engine(database_url, echo=echo, connect_args=connect_args)


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = build_engine(settings.database_url, echo=settings.database_echo)
    return _engine


def init_db(engine: Optional[Engine] = None) -> None:
    # Register the table models on SQLModel.metadata before creating them
    from dyntables.infrastructure.db import models  # noqa: F401

    SQLModel.metadata.create_all(engine or get_engine())
    logger.info("Database schema ensured")
