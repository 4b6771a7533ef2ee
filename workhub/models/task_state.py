"""TaskState model: a board-scoped workflow stage."""

import uuid

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from workhub.models.base import SoftDeleteMixin, TimestampMixin, new_uuid

NEW_STATE_CODE = "NEW"

# (code, name) pairs seeded onto every new board
DEFAULT_TASK_STATES: tuple[tuple[str, str], ...] = (
    (NEW_STATE_CODE, "New"),
    ("IN_PROGRESS", "In Progress"),
    ("REVIEW", "Review"),
    ("DONE", "Done"),
)


class TaskState(TimestampMixin, SoftDeleteMixin, SQLModel, table=True):
    __tablename__ = "task_states"
    __table_args__ = (UniqueConstraint("board_id", "code", name="uq_task_state_board_code"),)

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    board_id: uuid.UUID = Field(foreign_key="boards.id", nullable=False, index=True)
    code: str = Field(max_length=75, nullable=False)
    name: str = Field(max_length=75, nullable=False)


# ── Pydantic schemas ─────────────────────────────────────────

class TaskStateCreate(SQLModel):
    code: str = Field(min_length=1, max_length=75)
    name: str = Field(min_length=1, max_length=75)


class TaskStateUpdate(SQLModel):
    code: str | None = Field(default=None, min_length=1, max_length=75)
    name: str | None = Field(default=None, min_length=1, max_length=75)


class TaskStateRead(SQLModel):
    id: uuid.UUID
    board_id: uuid.UUID
    code: str
    name: str


class TaskStateCopy(SQLModel):
    target_board_id: uuid.UUID
