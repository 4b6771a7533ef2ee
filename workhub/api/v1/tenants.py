"""Tenant endpoints. Creation, plan changes and deletion are platform-level."""

import uuid

from fastapi import APIRouter, Depends, status

from workhub.api.deps import Ctx, PlatformAdmin, RequireRank, Session
from workhub.models.employee import EmployeeRead, Position
from workhub.models.project import ProjectRead
from workhub.models.tenant import ChangePlanRequest, TenantCreate, TenantRead, TenantUpdate
from workhub.services import employees, projects, tenants

router = APIRouter(prefix="/tenants", tags=["tenants"])


@router.post(
    "",
    response_model=TenantRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(PlatformAdmin)],
)
async def create_tenant(body: TenantCreate, session: Session) -> TenantRead:
    return await tenants.create(session, body)


@router.get("", response_model=list[TenantRead], dependencies=[Depends(PlatformAdmin)])
async def list_tenants(session: Session) -> list[TenantRead]:
    return await tenants.list_tenants(session)


@router.get("/{tenant_id}", response_model=TenantRead)
async def get_tenant(tenant_id: uuid.UUID, ctx: Ctx, session: Session) -> TenantRead:
    return await tenants.get(ctx, session, tenant_id)


@router.put("/{tenant_id}", response_model=TenantRead)
async def update_tenant(
    tenant_id: uuid.UUID, body: TenantUpdate, ctx: Ctx, session: Session
) -> TenantRead:
    return await tenants.update(ctx, session, tenant_id, body)


@router.put("/{tenant_id}/plan", response_model=TenantRead, dependencies=[Depends(PlatformAdmin)])
async def change_plan(
    tenant_id: uuid.UUID, body: ChangePlanRequest, ctx: Ctx, session: Session
) -> TenantRead:
    return await tenants.change_plan(ctx, session, tenant_id, body.new_plan)


@router.delete(
    "/{tenant_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(PlatformAdmin)],
)
async def delete_tenant(tenant_id: uuid.UUID, ctx: Ctx, session: Session) -> None:
    await tenants.delete(ctx, session, tenant_id)


# ── Tenant-scoped listings ───────────────────────────────────

@router.get(
    "/{tenant_id}/employees",
    response_model=list[EmployeeRead],
    dependencies=[Depends(RequireRank(Position.MANAGER))],
)
async def list_employees(tenant_id: uuid.UUID, ctx: Ctx, session: Session) -> list[EmployeeRead]:
    return await employees.list_by_tenant(ctx, session, tenant_id)


@router.get(
    "/{tenant_id}/projects",
    response_model=list[ProjectRead],
    dependencies=[Depends(RequireRank(Position.EMPLOYEE))],
)
async def list_projects(tenant_id: uuid.UUID, ctx: Ctx, session: Session) -> list[ProjectRead]:
    return await projects.list_by_tenant(ctx, session, tenant_id)
