"""Account model: a login identity, independent of any tenant."""

import re
import uuid
from datetime import datetime

from pydantic import field_validator
from sqlmodel import Field, SQLModel

from workhub.models.base import SoftDeleteMixin, TimestampMixin, new_uuid
from workhub.models.role import RoleRead

_PHONE = re.compile(r"^\+?998\d{9}$")
_PASSWORD_DIGIT = re.compile(r"\d")
_PASSWORD_SPECIAL = re.compile(r"[!@#$%&()\-+]")


def check_phone(value: str) -> str:
    if not _PHONE.fullmatch(value):
        raise ValueError("Please enter a valid phone number (e.g. 998901234567)")
    return value


def check_password_strength(value: str) -> str:
    if len(value) < 8:
        raise ValueError("Password must be at least 8 characters long")
    if not _PASSWORD_DIGIT.search(value) or not _PASSWORD_SPECIAL.search(value):
        raise ValueError("Password must contain at least one digit and one special character")
    return value


class Account(TimestampMixin, SoftDeleteMixin, SQLModel, table=True):
    __tablename__ = "accounts"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    phone_num: str = Field(max_length=32, unique=True, nullable=False, index=True)
    password_hash: str = Field(nullable=False)
    first_name: str = Field(max_length=72, nullable=False)
    last_name: str = Field(default="", max_length=60)
    is_active: bool = Field(default=True)


class AccountRole(SQLModel, table=True):
    __tablename__ = "account_roles"

    account_id: uuid.UUID = Field(foreign_key="accounts.id", primary_key=True)
    role_id: uuid.UUID = Field(foreign_key="roles.id", primary_key=True)


# ── Pydantic schemas ─────────────────────────────────────────

class AccountCreate(SQLModel):
    phone_num: str = Field(max_length=32)
    first_name: str = Field(min_length=2, max_length=72)
    last_name: str = Field(default="", max_length=60)
    password: str = Field(max_length=128)
    confirm_password: str = Field(max_length=128)

    @field_validator("phone_num")
    @classmethod
    def _valid_phone(cls, v: str) -> str:
        return check_phone(v)

    @field_validator("password")
    @classmethod
    def _strong_password(cls, v: str) -> str:
        return check_password_strength(v)


class AccountUpdate(SQLModel):
    first_name: str | None = Field(default=None, min_length=2, max_length=72)
    last_name: str | None = Field(default=None, max_length=60)


class AccountSecurityUpdate(SQLModel):
    phone_num: str | None = Field(default=None, max_length=32)
    old_password: str | None = None
    new_password: str | None = None
    confirm_password: str | None = None

    @field_validator("phone_num")
    @classmethod
    def _valid_phone(cls, v: str | None) -> str | None:
        return v if v is None else check_phone(v)

    @field_validator("new_password")
    @classmethod
    def _strong_password(cls, v: str | None) -> str | None:
        return v if v is None else check_password_strength(v)


class AccountRoleGrant(SQLModel):
    role_code: str = Field(max_length=20)


class AccountRead(SQLModel):
    id: uuid.UUID
    phone_num: str
    first_name: str
    last_name: str
    is_active: bool
    roles: list[RoleRead] = []
    created_at: datetime
