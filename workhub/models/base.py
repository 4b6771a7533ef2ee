"""Column mixins shared by every table model."""

import uuid
from datetime import datetime, timezone

from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    """Naive UTC now; all timestamp columns are stored without tzinfo."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_uuid() -> uuid.UUID:
    return uuid.uuid4()


class TimestampMixin(SQLModel):
    created_at: datetime = Field(default_factory=utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, nullable=False)

    def touch(self) -> None:
        self.updated_at = utcnow()


class SoftDeleteMixin(SQLModel):
    """Rows are never hard-deleted; lookups filter on ``deleted``."""

    deleted: bool = Field(default=False, nullable=False, index=True)

    def mark_deleted(self) -> None:
        self.deleted = True
