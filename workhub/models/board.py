"""Board model: owned by exactly one project."""

import uuid
from datetime import datetime

from sqlalchemy import Text
from sqlmodel import Column, Field, SQLModel

from workhub.models.base import SoftDeleteMixin, TimestampMixin, new_uuid


class Board(TimestampMixin, SoftDeleteMixin, SQLModel, table=True):
    __tablename__ = "boards"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    project_id: uuid.UUID = Field(foreign_key="projects.id", nullable=False, index=True)
    name: str = Field(max_length=72, nullable=False)
    description: str | None = Field(default=None, sa_column=Column(Text))
    is_active: bool = Field(default=True)


# ── Pydantic schemas ─────────────────────────────────────────

class BoardCreate(SQLModel):
    name: str = Field(min_length=2, max_length=72)
    description: str | None = Field(default=None, max_length=320)
    project_id: uuid.UUID


class BoardUpdate(SQLModel):
    name: str | None = Field(default=None, min_length=2, max_length=72)
    description: str | None = Field(default=None, max_length=320)
    is_active: bool | None = None


class BoardRead(SQLModel):
    id: uuid.UUID
    project_id: uuid.UUID
    name: str
    description: str | None
    is_active: bool
    states: list[str]  # state codes
    created_at: datetime
