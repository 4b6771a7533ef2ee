"""Role / Permission models: flat RBAC pair."""

import uuid

from sqlmodel import Field, SQLModel

from workhub.models.base import SoftDeleteMixin, TimestampMixin, new_uuid


class Permission(TimestampMixin, SoftDeleteMixin, SQLModel, table=True):
    __tablename__ = "permissions"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    code: str = Field(max_length=75, unique=True, nullable=False, index=True)
    name: str = Field(max_length=75, nullable=False)


class Role(TimestampMixin, SoftDeleteMixin, SQLModel, table=True):
    __tablename__ = "roles"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    code: str = Field(max_length=20, unique=True, nullable=False, index=True)
    name: str = Field(max_length=50, nullable=False)


class RolePermission(SQLModel, table=True):
    __tablename__ = "role_permissions"

    role_id: uuid.UUID = Field(foreign_key="roles.id", primary_key=True)
    permission_id: uuid.UUID = Field(foreign_key="permissions.id", primary_key=True)


# ── Pydantic schemas ─────────────────────────────────────────

class PermissionRead(SQLModel):
    code: str
    name: str


class RoleRead(SQLModel):
    code: str
    name: str
    permissions: list[PermissionRead] = []
