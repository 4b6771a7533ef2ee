"""Task model plus its assignee / attachment links and audit trail."""

import uuid
from datetime import datetime, timezone
from enum import StrEnum

from pydantic import field_validator
from sqlalchemy import Text
from sqlmodel import Column, Field, SQLModel

from workhub.models.base import SoftDeleteMixin, TimestampMixin, new_uuid, utcnow
from workhub.models.file import FileRead


class TaskPriority(StrEnum):
    LOW = "LOW"
    MEDIUM_LOW = "MEDIUM_LOW"
    MEDIUM = "MEDIUM"
    MEDIUM_HIGH = "MEDIUM_HIGH"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class TaskActionType(StrEnum):
    CREATED = "CREATED"
    UPDATED = "UPDATED"
    BOARD_CHANGED = "BOARD_CHANGED"
    STATE_CHANGED = "STATE_CHANGED"
    ASSIGNED = "ASSIGNED"
    UNASSIGNED = "UNASSIGNED"
    FILES_ATTACHED = "FILES_ATTACHED"
    DELETED = "DELETED"


class Task(TimestampMixin, SoftDeleteMixin, SQLModel, table=True):
    __tablename__ = "tasks"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    board_id: uuid.UUID = Field(foreign_key="boards.id", nullable=False, index=True)
    state_id: uuid.UUID = Field(foreign_key="task_states.id", nullable=False, index=True)
    owner_id: uuid.UUID = Field(foreign_key="employees.id", nullable=False, index=True)

    title: str = Field(max_length=255, nullable=False)
    description: str = Field(default="", sa_column=Column(Text, nullable=False, server_default=""))
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM_LOW, index=True)
    due_date: datetime | None = Field(default=None, index=True)

    # Optimistic-lock counter, bumped on every mutation
    version: int = Field(default=1, nullable=False)


class TaskAssignee(SQLModel, table=True):
    __tablename__ = "task_assignees"

    task_id: uuid.UUID = Field(foreign_key="tasks.id", primary_key=True)
    employee_id: uuid.UUID = Field(foreign_key="employees.id", primary_key=True, index=True)


class TaskFile(SQLModel, table=True):
    __tablename__ = "task_files"

    task_id: uuid.UUID = Field(foreign_key="tasks.id", primary_key=True)
    file_id: uuid.UUID = Field(foreign_key="files.id", primary_key=True)


class TaskAction(SQLModel, table=True):
    """Append-only audit record. Never updated or deleted."""

    __tablename__ = "task_actions"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    task_id: uuid.UUID = Field(foreign_key="tasks.id", nullable=False, index=True)
    modifier_id: uuid.UUID = Field(foreign_key="employees.id", nullable=False)
    action_type: TaskActionType = Field(nullable=False)
    old_value: str | None = Field(default=None)
    new_value: str | None = Field(default=None)
    comment: str | None = Field(default=None, max_length=150)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)


# ── Pydantic schemas ─────────────────────────────────────────

def _future_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return value
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    if value <= utcnow():
        raise ValueError("The date must be in the future")
    return value


class TaskCreate(SQLModel):
    board_id: uuid.UUID
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    priority: TaskPriority = TaskPriority.MEDIUM_LOW
    due_date: datetime | None = None
    file_keys: list[str] = []

    @field_validator("due_date")
    @classmethod
    def _due_in_future(cls, v: datetime | None) -> datetime | None:
        return _future_utc(v)


class TaskUpdate(SQLModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    priority: TaskPriority | None = None
    due_date: datetime | None = None
    board_id: uuid.UUID | None = None
    file_keys: list[str] | None = None
    # Version the caller last read; a mismatch is a concurrent-update conflict
    version: int | None = None

    @field_validator("due_date")
    @classmethod
    def _due_in_future(cls, v: datetime | None) -> datetime | None:
        return _future_utc(v)


class TaskStateChange(SQLModel):
    state_code: str = Field(min_length=1, max_length=75)


class TaskRead(SQLModel):
    id: uuid.UUID
    board_id: uuid.UUID
    state_id: uuid.UUID
    state: str  # state code
    owner_id: uuid.UUID
    title: str
    description: str
    priority: TaskPriority
    due_date: datetime | None
    assignee_ids: list[uuid.UUID]
    files: list[FileRead]
    version: int
    created_at: datetime
    updated_at: datetime


class TaskActionRead(SQLModel):
    id: uuid.UUID
    task_id: uuid.UUID
    modifier_id: uuid.UUID
    modifier_name: str
    action_type: TaskActionType
    old_value: str | None
    new_value: str | None
    comment: str | None
    created_at: datetime
