"""Employee model: an account's membership record across tenants."""

import uuid
from datetime import datetime
from enum import StrEnum

from sqlmodel import Field, SQLModel

from workhub.models.base import SoftDeleteMixin, TimestampMixin, new_uuid, utcnow


class Position(StrEnum):
    OWNER = "OWNER"
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    TEAM_LEAD = "TEAM_LEAD"
    EMPLOYEE = "EMPLOYEE"
    INTERN = "INTERN"


# Lower rank = higher authority; independent of enum declaration order.
POSITION_RANK: dict[Position, int] = {
    Position.OWNER: 0,
    Position.ADMIN: 1,
    Position.MANAGER: 2,
    Position.TEAM_LEAD: 3,
    Position.EMPLOYEE: 4,
    Position.INTERN: 5,
}


def is_at_least(current: Position, minimum: Position) -> bool:
    """True when ``current`` carries at least the authority of ``minimum``."""
    return POSITION_RANK[current] <= POSITION_RANK[minimum]


class Employee(TimestampMixin, SoftDeleteMixin, SQLModel, table=True):
    __tablename__ = "employees"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    code: str = Field(max_length=20, unique=True, nullable=False)
    account_id: uuid.UUID = Field(
        foreign_key="accounts.id", unique=True, nullable=False, index=True,
    )
    position: Position = Field(default=Position.INTERN)
    is_active: bool = Field(default=True)


class EmployeeTenant(SQLModel, table=True):
    __tablename__ = "employee_tenants"

    employee_id: uuid.UUID = Field(foreign_key="employees.id", primary_key=True)
    tenant_id: uuid.UUID = Field(foreign_key="tenants.id", primary_key=True, index=True)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)


# ── Pydantic schemas ─────────────────────────────────────────

class EmployeeCreate(SQLModel):
    account_id: uuid.UUID
    tenant_ids: list[uuid.UUID] = []
    position: Position = Position.INTERN


class EmployeeUpdate(SQLModel):
    is_active: bool | None = None
    position: Position | None = None


class ChangePositionRequest(SQLModel):
    position: Position


class EmployeeRead(SQLModel):
    id: uuid.UUID
    code: str
    is_active: bool
    position: Position
    account_id: uuid.UUID
    tenant_ids: list[uuid.UUID]
    created_at: datetime
    updated_at: datetime
