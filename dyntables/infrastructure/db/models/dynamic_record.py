from typing import Any, Dict, Optional

from sqlalchemy import JSON, Column, Index
from sqlmodel import Field

from dyntables.domain.entities.record import Record

from .base import AuditMixin, BaseModel, TimestampMixin


class DynamicRecordModel(BaseModel, AuditMixin, TimestampMixin, table=True):
    """
    Records of every dynamic table, data kept as a JSON document.
    """
    __tablename__ = "dynamic_records"
    __table_args__ = (Index("ix_dynamic_records_c_name_table_slug", "c_name", "table_slug"),)

    c_name: str = Field(max_length=100, description="Tenant the record belongs to")
    table_slug: str = Field(max_length=100, description="Slug of the owning table")
    updated_by: Optional[str] = Field(default=None, max_length=100)

    data: Dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(JSON, nullable=False),
        description="Validated field values"
    )

    @classmethod
    def from_entity(cls, record: Record) -> "DynamicRecordModel":
        return cls(
            id=record.id,
            c_name=record.c_name,
            table_slug=record.table_slug,
            data=dict(record.data),
            created_by=record.created_by,
            updated_by=record.updated_by,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )

    def apply(self, record: Record) -> None:
        # Reassign so the JSON column is flagged dirty
        self.data = dict(record.data)
        self.updated_by = record.updated_by
        self.updated_at = record.updated_at

    def to_entity(self) -> Record:
        return Record(
            id=self.id,
            c_name=self.c_name,
            table_slug=self.table_slug,
            data=dict(self.data or {}),
            created_by=self.created_by,
            updated_by=self.updated_by,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
