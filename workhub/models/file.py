"""Stored file metadata: the blob itself lives in file storage."""

import uuid
from datetime import datetime
from enum import StrEnum

from sqlmodel import Field, SQLModel

from workhub.models.base import SoftDeleteMixin, TimestampMixin, new_uuid


class FileType(StrEnum):
    DOCUMENT = "DOCUMENT"
    PHOTO = "PHOTO"
    VIDEO = "VIDEO"


class StoredFile(TimestampMixin, SoftDeleteMixin, SQLModel, table=True):
    __tablename__ = "files"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    # Tenant selected by the uploader; None for files uploaded outside a tenant
    tenant_id: uuid.UUID | None = Field(default=None, foreign_key="tenants.id", index=True)
    file_type: FileType = Field(nullable=False)
    original_name: str = Field(max_length=255, nullable=False)
    key_name: str = Field(max_length=128, unique=True, nullable=False, index=True)
    content_type: str | None = Field(default=None, max_length=255)
    size: int = Field(nullable=False)


# ── Pydantic schemas ─────────────────────────────────────────

class FileRead(SQLModel):
    id: uuid.UUID
    file_type: FileType
    original_name: str
    key_name: str
    size: int
    created_at: datetime
