from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, Column, UniqueConstraint
from sqlmodel import Field

from dyntables.domain.entities.table import Table, TableField

from .base import AuditMixin, BaseModel, TimestampMixin


class DynamicTableModel(BaseModel, AuditMixin, TimestampMixin, table=True):
    """
    Table definitions. Field definitions live in a JSON column.
    """
    __tablename__ = "dynamic_tables"
    __table_args__ = (UniqueConstraint("c_name", "slug", name="uq_dynamic_tables_c_name_slug"),)

    c_name: str = Field(index=True, max_length=100, description="Tenant the table belongs to")
    slug: str = Field(max_length=100, description="URL-safe identifier, unique per tenant")
    name: str = Field(max_length=200)
    icon: Optional[str] = Field(default=None, max_length=100)
    description: Optional[str] = Field(default=None)
    is_active: bool = Field(default=True)

    field_definitions: List[Dict[str, Any]] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
        description="Ordered field definitions"
    )

    @classmethod
    def from_entity(cls, table: Table) -> "DynamicTableModel":
        return cls(
            id=table.id,
            c_name=table.c_name,
            slug=table.slug,
            name=table.name,
            icon=table.icon,
            description=table.description,
            is_active=table.is_active,
            field_definitions=[f.to_dict() for f in table.fields],
            created_by=table.created_by,
            created_at=table.created_at,
            updated_at=table.updated_at,
        )

    def apply(self, table: Table) -> None:
        self.slug = table.slug
        self.name = table.name
        self.icon = table.icon
        self.description = table.description
        self.is_active = table.is_active
        self.field_definitions = [f.to_dict() for f in table.fields]
        self.updated_at = table.updated_at

    def to_entity(self) -> Table:
        table = Table(
            id=self.id,
            c_name=self.c_name,
            slug=self.slug,
            name=self.name,
            icon=self.icon,
            description=self.description,
            is_active=self.is_active,
            fields=[TableField.from_dict(f) for f in self.field_definitions or []],
            created_by=self.created_by,
        )
        table.created_at = self.created_at
        table.updated_at = self.updated_at
        return table
