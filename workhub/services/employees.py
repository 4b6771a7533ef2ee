"""Employee records and their tenant memberships."""

import logging
import secrets
import string
import uuid

from sqlalchemy import delete as sa_delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from workhub.core.context import RequestContext
from workhub.core.exceptions import (
    AlreadyExistsError,
    BadRequestError,
    NotFoundError,
    UnauthorizedError,
)
from workhub.models.account import Account
from workhub.models.employee import (
    Employee,
    EmployeeCreate,
    EmployeeRead,
    EmployeeTenant,
    EmployeeUpdate,
    Position,
    is_at_least,
)
from workhub.models.tenant import Tenant
from workhub.services import repository, tenant_guard, tenants

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_LENGTH = 8
MAX_CODE_RETRIES = 10


async def _generate_code(session: AsyncSession) -> str:
    for _ in range(MAX_CODE_RETRIES):
        code = "EMP-" + "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))
        stmt = select(Employee.id).where(Employee.code == code)
        if (await session.execute(stmt)).first() is None:
            return code
    raise BadRequestError("Could not generate a unique employee code")


async def to_read(session: AsyncSession, employee: Employee) -> EmployeeRead:
    return EmployeeRead(
        id=employee.id,
        code=employee.code,
        is_active=employee.is_active,
        position=employee.position,
        account_id=employee.account_id,
        tenant_ids=await tenant_guard.employee_tenant_ids(session, employee.id),
        created_at=employee.created_at,
        updated_at=employee.updated_at,
    )


async def get_employee(
    ctx: RequestContext, session: AsyncSession, employee_id: uuid.UUID
) -> Employee:
    """Live employee that belongs to the caller's current tenant."""
    employee = await repository.get_live_or_404(session, Employee, employee_id, "Employee")

    tenant_id = ctx.current_tenant()
    if tenant_id is None or not await tenant_guard.is_member(session, employee.id, tenant_id):
        logger.warning(
            "Employee access denied: %s is not in tenant %s (account=%s)",
            employee.id, tenant_id, ctx.account_id,
        )
        raise UnauthorizedError("Employee access denied")
    return employee


async def _member_tenants(session: AsyncSession, employee_id: uuid.UUID) -> list[Tenant]:
    stmt = (
        select(Tenant)
        .join(EmployeeTenant, EmployeeTenant.tenant_id == Tenant.id)  # type: ignore[arg-type]
        .where(EmployeeTenant.employee_id == employee_id, Tenant.deleted.is_(False))  # type: ignore[attr-defined]
    )
    return list((await session.execute(stmt)).scalars().all())


# ── Platform-level operations ────────────────────────────────

async def create(session: AsyncSession, body: EmployeeCreate) -> EmployeeRead:
    await repository.get_live_or_404(session, Account, body.account_id, "Account")

    stmt = select(Employee.id).where(Employee.account_id == body.account_id)
    if (await session.execute(stmt)).first() is not None:
        raise AlreadyExistsError("An employee already exists for this account")

    member_of: list[Tenant] = []
    for tenant_id in dict.fromkeys(body.tenant_ids):
        tenant = await repository.get_live_or_404(session, Tenant, tenant_id, "Tenant")
        await tenants.ensure_seat_available(session, tenant)
        member_of.append(tenant)

    employee = Employee(
        code=await _generate_code(session),
        account_id=body.account_id,
        position=body.position,
    )
    session.add(employee)
    await repository.flush_unique(session, "An employee already exists for this account")
    for tenant in member_of:
        session.add(EmployeeTenant(employee_id=employee.id, tenant_id=tenant.id))
    await session.commit()

    logger.info("Employee %s (%s) created in %d tenants", employee.id, employee.code, len(member_of))
    return await to_read(session, employee)


async def add_membership(
    session: AsyncSession, employee_id: uuid.UUID, tenant_id: uuid.UUID
) -> EmployeeRead:
    employee = await repository.get_live_or_404(session, Employee, employee_id, "Employee")
    tenant = await repository.get_live_or_404(session, Tenant, tenant_id, "Tenant")

    if await tenant_guard.is_member(session, employee.id, tenant.id):
        raise AlreadyExistsError("Employee already belongs to this tenant")
    if employee.is_active:
        await tenants.ensure_seat_available(session, tenant)

    session.add(EmployeeTenant(employee_id=employee.id, tenant_id=tenant.id))
    await session.commit()
    logger.info("Employee %s joined tenant %s", employee.id, tenant.id)
    return await to_read(session, employee)


async def remove_membership(
    session: AsyncSession, employee_id: uuid.UUID, tenant_id: uuid.UUID
) -> EmployeeRead:
    employee = await repository.get_live_or_404(session, Employee, employee_id, "Employee")
    if not await tenant_guard.is_member(session, employee.id, tenant_id):
        raise NotFoundError("Employee does not belong to this tenant")

    await session.execute(
        sa_delete(EmployeeTenant).where(
            EmployeeTenant.employee_id == employee.id,
            EmployeeTenant.tenant_id == tenant_id,
        )
    )
    await session.commit()
    logger.info("Employee %s left tenant %s", employee.id, tenant_id)
    return await to_read(session, employee)


# ── Tenant-scoped operations ─────────────────────────────────

def _check_can_grant(actor: Employee, position: Position) -> None:
    if not is_at_least(actor.position, position):
        logger.warning(
            "Employee %s (%s) may not grant position %s", actor.id, actor.position, position
        )
        raise UnauthorizedError(f"Cannot grant position {position} above your own")


def _check_can_manage(actor: Employee, target: Employee) -> None:
    if not is_at_least(actor.position, target.position):
        logger.warning(
            "Employee %s (%s) may not manage %s (%s)",
            actor.id, actor.position, target.id, target.position,
        )
        raise UnauthorizedError(f"Cannot manage an employee with position {target.position}")


async def get(ctx: RequestContext, session: AsyncSession, employee_id: uuid.UUID) -> EmployeeRead:
    return await to_read(session, await get_employee(ctx, session, employee_id))


async def list_by_tenant(
    ctx: RequestContext, session: AsyncSession, tenant_id: uuid.UUID
) -> list[EmployeeRead]:
    tenant_guard.check_tenant_access(ctx, tenant_id)
    stmt = (
        select(Employee)
        .join(EmployeeTenant, EmployeeTenant.employee_id == Employee.id)  # type: ignore[arg-type]
        .where(EmployeeTenant.tenant_id == tenant_id, Employee.deleted.is_(False))  # type: ignore[attr-defined]
        .order_by(Employee.code)
    )
    employees = (await session.execute(stmt)).scalars().all()
    logger.info("Fetched %d employees for tenant %s", len(employees), tenant_id)
    return [await to_read(session, e) for e in employees]


async def update(
    ctx: RequestContext, session: AsyncSession, employee_id: uuid.UUID, body: EmployeeUpdate
) -> EmployeeRead:
    employee = await get_employee(ctx, session, employee_id)

    position_changed = body.position is not None and body.position != employee.position
    activity_changed = body.is_active is not None and body.is_active != employee.is_active

    # All checks run before the row is touched
    if position_changed or activity_changed:
        actor = await tenant_guard.acting_employee(ctx, session)
        _check_can_manage(actor, employee)
        if position_changed:
            _check_can_grant(actor, body.position)
    if activity_changed and body.is_active:
        for tenant in await _member_tenants(session, employee.id):
            await tenants.ensure_seat_available(session, tenant)

    if position_changed:
        employee.position = body.position
    if activity_changed:
        employee.is_active = body.is_active

    repository.touch(session, employee)
    await session.commit()
    return await to_read(session, employee)


async def get_position(
    ctx: RequestContext, session: AsyncSession, employee_id: uuid.UUID
) -> Position:
    return (await get_employee(ctx, session, employee_id)).position


async def change_position(
    ctx: RequestContext, session: AsyncSession, employee_id: uuid.UUID, position: Position
) -> EmployeeRead:
    return await update(ctx, session, employee_id, EmployeeUpdate(position=position))


async def delete(ctx: RequestContext, session: AsyncSession, employee_id: uuid.UUID) -> None:
    employee = await get_employee(ctx, session, employee_id)
    if employee.id == ctx.employee_id:
        raise BadRequestError("You cannot delete your own employee record")
    _check_can_manage(await tenant_guard.acting_employee(ctx, session), employee)
    repository.soft_delete(session, employee)
    await session.commit()
    logger.info("Employee %s deleted", employee_id)
