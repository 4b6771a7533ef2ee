"""Project model: owned by exactly one tenant."""

import uuid
from datetime import datetime

from sqlalchemy import Text
from sqlmodel import Column, Field, SQLModel

from workhub.models.base import SoftDeleteMixin, TimestampMixin, new_uuid


class Project(TimestampMixin, SoftDeleteMixin, SQLModel, table=True):
    __tablename__ = "projects"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    tenant_id: uuid.UUID = Field(foreign_key="tenants.id", nullable=False, index=True)
    name: str = Field(max_length=72, nullable=False)
    description: str | None = Field(default=None, sa_column=Column(Text))
    is_active: bool = Field(default=True)


# ── Pydantic schemas ─────────────────────────────────────────

class ProjectCreate(SQLModel):
    name: str = Field(min_length=2, max_length=72)
    description: str | None = Field(default=None, max_length=320)
    tenant_id: uuid.UUID


class ProjectUpdate(SQLModel):
    name: str | None = Field(default=None, min_length=2, max_length=72)
    description: str | None = Field(default=None, max_length=320)
    is_active: bool | None = None


class ProjectRead(SQLModel):
    id: uuid.UUID
    tenant_id: uuid.UUID
    name: str
    description: str | None
    is_active: bool
    created_at: datetime
