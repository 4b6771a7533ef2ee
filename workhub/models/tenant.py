"""Tenant model: top-level isolation boundary."""

import uuid
from enum import StrEnum

from sqlmodel import Field, SQLModel

from workhub.models.base import SoftDeleteMixin, TimestampMixin, new_uuid


class TenantPlan(StrEnum):
    FREE = "FREE"
    PRO = "PRO"
    ENTERPRISE = "ENTERPRISE"

    @property
    def max_users(self) -> int:
        return PLAN_SEATS[self]


PLAN_SEATS: dict[TenantPlan, int] = {
    TenantPlan.FREE: 5,
    TenantPlan.PRO: 50,
    TenantPlan.ENTERPRISE: 500,
}


class Tenant(TimestampMixin, SoftDeleteMixin, SQLModel, table=True):
    __tablename__ = "tenants"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    name: str = Field(max_length=72, unique=True, nullable=False, index=True)
    address: str | None = Field(default=None, max_length=72)
    tagline: str | None = Field(default=None, max_length=150)
    subscription_plan: TenantPlan = Field(default=TenantPlan.FREE)
    # Snapshot of the plan's seat count at the time the plan was set
    max_users: int = Field(default=PLAN_SEATS[TenantPlan.FREE])
    is_active: bool = Field(default=True, index=True)


# ── Pydantic schemas ─────────────────────────────────────────

class TenantCreate(SQLModel):
    name: str = Field(min_length=2, max_length=72)
    address: str | None = Field(default=None, max_length=72)
    tagline: str | None = Field(default=None, max_length=150)


class TenantUpdate(SQLModel):
    name: str | None = Field(default=None, min_length=2, max_length=72)
    address: str | None = Field(default=None, max_length=72)
    tagline: str | None = Field(default=None, max_length=150)


class ChangePlanRequest(SQLModel):
    new_plan: TenantPlan


class TenantRead(SQLModel):
    id: uuid.UUID
    name: str
    address: str | None
    tagline: str | None
    subscription_plan: TenantPlan
    is_active: bool
    max_users: int


class TenantInfo(SQLModel):
    tenant_id: uuid.UUID
    tenant_name: str
