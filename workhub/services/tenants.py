"""Tenant lifecycle and the subscription seat cap."""

import logging
import uuid

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from workhub.core.context import RequestContext
from workhub.core.exceptions import AlreadyExistsError, SubscriptionLimitExceededError
from workhub.models.employee import Employee, EmployeeTenant, Position
from workhub.models.tenant import Tenant, TenantCreate, TenantPlan, TenantRead, TenantUpdate
from workhub.services import cascade, repository, tenant_guard

logger = logging.getLogger(__name__)


def to_read(tenant: Tenant) -> TenantRead:
    return TenantRead.model_validate(tenant)


async def _check_name_unique(
    session: AsyncSession, name: str, exclude_id: uuid.UUID | None = None
) -> None:
    # Deleted tenants still hold their name
    stmt = select(func.count()).select_from(Tenant).where(func.lower(Tenant.name) == name.lower())
    if exclude_id is not None:
        stmt = stmt.where(Tenant.id != exclude_id)
    if (await session.execute(stmt)).scalar_one() > 0:
        raise AlreadyExistsError(f"Tenant with name '{name}' already exists")


async def count_active_employees(session: AsyncSession, tenant_id: uuid.UUID) -> int:
    stmt = (
        select(func.count())
        .select_from(Employee)
        .join(EmployeeTenant, EmployeeTenant.employee_id == Employee.id)  # type: ignore[arg-type]
        .where(
            EmployeeTenant.tenant_id == tenant_id,
            Employee.is_active.is_(True),  # type: ignore[attr-defined]
            Employee.deleted.is_(False),  # type: ignore[attr-defined]
        )
    )
    return (await session.execute(stmt)).scalar_one()


def _check_limit(tenant: Tenant, active: int, limit: int, plan: TenantPlan) -> None:
    if active > limit:
        logger.warning(
            "Seat cap hit for tenant %s: %d active, plan %s allows %d",
            tenant.id, active, plan, limit,
        )
        raise SubscriptionLimitExceededError(
            f"Current active users ({active}) exceed allowed limit ({limit}) for plan {plan}"
        )


async def validate_subscription_limits(
    session: AsyncSession, tenant: Tenant, plan: TenantPlan | None = None
) -> None:
    plan = plan or tenant.subscription_plan
    active = await count_active_employees(session, tenant.id)
    _check_limit(tenant, active, plan.max_users, plan)


async def ensure_seat_available(session: AsyncSession, tenant: Tenant) -> None:
    """Fail when one more active employee would exceed the tenant's cap."""
    active = await count_active_employees(session, tenant.id)
    _check_limit(tenant, active + 1, tenant.max_users, tenant.subscription_plan)


# ── Fetch-then-authorize ─────────────────────────────────────

async def get_tenant(
    ctx: RequestContext,
    session: AsyncSession,
    tenant_id: uuid.UUID,
    minimum: Position | None = None,
) -> Tenant:
    """Platform admins reach any tenant; everyone else only the selected one.

    Non-admin callers must still be live, active members of that tenant.
    """
    tenant = await repository.get_live_or_404(session, Tenant, tenant_id, "Tenant")
    if tenant_guard.is_platform_admin(ctx):
        return tenant
    tenant_guard.validate_entity_access(ctx, tenant.id, "Tenant")
    if minimum is not None:
        await tenant_guard.require_rank(ctx, session, minimum)
    else:
        await tenant_guard.acting_employee(ctx, session)
    return tenant


# ── Operations ───────────────────────────────────────────────

async def create(session: AsyncSession, body: TenantCreate) -> TenantRead:
    await _check_name_unique(session, body.name)
    tenant = Tenant(
        name=body.name,
        address=body.address,
        tagline=body.tagline,
        subscription_plan=TenantPlan.FREE,
        max_users=TenantPlan.FREE.max_users,
    )
    session.add(tenant)
    await repository.commit_unique(session, f"Tenant with name '{body.name}' already exists")
    logger.info("Tenant %s created (%s)", tenant.id, tenant.name)
    return to_read(tenant)


async def list_tenants(session: AsyncSession) -> list[TenantRead]:
    tenants = await repository.list_live(session, Tenant, order_by=Tenant.name)
    return [to_read(t) for t in tenants]


async def get(ctx: RequestContext, session: AsyncSession, tenant_id: uuid.UUID) -> TenantRead:
    return to_read(await get_tenant(ctx, session, tenant_id))


async def update(
    ctx: RequestContext, session: AsyncSession, tenant_id: uuid.UUID, body: TenantUpdate
) -> TenantRead:
    tenant = await get_tenant(ctx, session, tenant_id, minimum=Position.ADMIN)

    data = body.model_dump(exclude_unset=True, exclude_none=True)
    if "name" in data:
        await _check_name_unique(session, data["name"], exclude_id=tenant.id)

    await validate_subscription_limits(session, tenant)

    for field, value in data.items():
        setattr(tenant, field, value)
    repository.touch(session, tenant)
    await repository.commit_unique(session, f"Tenant with name '{tenant.name}' already exists")
    return to_read(tenant)


async def change_plan(
    ctx: RequestContext, session: AsyncSession, tenant_id: uuid.UUID, new_plan: TenantPlan
) -> TenantRead:
    tenant = await get_tenant(ctx, session, tenant_id)
    if tenant.subscription_plan == new_plan:
        return to_read(tenant)

    # Rejected before the row is touched, so a failed downgrade leaves the plan as is
    await validate_subscription_limits(session, tenant, new_plan)

    old_plan = tenant.subscription_plan
    tenant.subscription_plan = new_plan
    tenant.max_users = new_plan.max_users
    repository.touch(session, tenant)
    await session.commit()
    logger.info("Tenant %s plan changed %s -> %s", tenant.id, old_plan, new_plan)
    return to_read(tenant)


async def delete(ctx: RequestContext, session: AsyncSession, tenant_id: uuid.UUID) -> None:
    tenant = await get_tenant(ctx, session, tenant_id)
    await cascade.delete_tenant_tree(session, tenant.id)
    repository.soft_delete(session, tenant)
    await session.commit()
    logger.info("Tenant %s deleted", tenant_id)
