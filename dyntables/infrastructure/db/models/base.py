from datetime import datetime
from typing import Optional
from uuid import uuid4

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from dyntables.utils.date_utils import utcnow


class BaseModel(SQLModel):
    """
    Base model with common fields for all database models.
    """

    id: str = Field(
        default_factory=lambda: str(uuid4()),
        primary_key=True,
        index=True,
        nullable=False,
        max_length=36,
        description="Unique identifier"
    )


class AuditMixin(SQLModel):
    created_by: Optional[str] = Field(default=None, max_length=100)


class TimestampMixin(SQLModel):
    """
    Mixin for models that need timestamp fields. Timestamps are naive UTC.
    """

    created_at: datetime = Field(
        default_factory=utcnow,
        sa_type=DateTime(),
        nullable=False,
        index=True,
        description="Record creation timestamp"
    )

    updated_at: datetime = Field(
        default_factory=utcnow,
        sa_type=DateTime(),
        nullable=False,
        description="Record last update timestamp"
    )
