"""Employee endpoints: tenant-scoped, gated by position."""

import uuid

from fastapi import APIRouter, Depends, status

from workhub.api.deps import Ctx, PlatformAdmin, RequireRank, Session
from workhub.models.employee import (
    ChangePositionRequest,
    EmployeeCreate,
    EmployeeRead,
    EmployeeUpdate,
    Position,
)
from workhub.services import employees

router = APIRouter(prefix="/employees", tags=["employees"])

_read = [Depends(RequireRank(Position.MANAGER))]
_write = [Depends(RequireRank(Position.ADMIN))]


@router.post(
    "",
    response_model=EmployeeRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(PlatformAdmin)],
)
async def create_employee(body: EmployeeCreate, session: Session) -> EmployeeRead:
    return await employees.create(session, body)


@router.get("/{employee_id}", response_model=EmployeeRead, dependencies=_read)
async def get_employee(employee_id: uuid.UUID, ctx: Ctx, session: Session) -> EmployeeRead:
    return await employees.get(ctx, session, employee_id)


@router.put("/{employee_id}", response_model=EmployeeRead, dependencies=_write)
async def update_employee(
    employee_id: uuid.UUID, body: EmployeeUpdate, ctx: Ctx, session: Session
) -> EmployeeRead:
    return await employees.update(ctx, session, employee_id, body)


@router.get("/{employee_id}/position", response_model=Position, dependencies=_read)
async def get_position(employee_id: uuid.UUID, ctx: Ctx, session: Session) -> Position:
    return await employees.get_position(ctx, session, employee_id)


@router.put("/{employee_id}/position", response_model=EmployeeRead, dependencies=_write)
async def change_position(
    employee_id: uuid.UUID, body: ChangePositionRequest, ctx: Ctx, session: Session
) -> EmployeeRead:
    return await employees.change_position(ctx, session, employee_id, body.position)


@router.delete("/{employee_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=_write)
async def delete_employee(employee_id: uuid.UUID, ctx: Ctx, session: Session) -> None:
    await employees.delete(ctx, session, employee_id)


# ── Memberships (platform admin) ─────────────────────────────

@router.post(
    "/{employee_id}/tenants/{tenant_id}",
    response_model=EmployeeRead,
    dependencies=[Depends(PlatformAdmin)],
)
async def add_membership(
    employee_id: uuid.UUID, tenant_id: uuid.UUID, session: Session
) -> EmployeeRead:
    return await employees.add_membership(session, employee_id, tenant_id)


@router.delete(
    "/{employee_id}/tenants/{tenant_id}",
    response_model=EmployeeRead,
    dependencies=[Depends(PlatformAdmin)],
)
async def remove_membership(
    employee_id: uuid.UUID, tenant_id: uuid.UUID, session: Session
) -> EmployeeRead:
    return await employees.remove_membership(session, employee_id, tenant_id)
