"""Tenant isolation guard and rank checks.

Every fetch-by-id of a tenant-scoped entity resolves the row first and then
calls ``validate_entity_access`` with the owning tenant before handing the
row to anyone. A missing row is ``NotFoundError``; an existing row owned by
another tenant is always ``UnauthorizedError``.

Rank is always resolved from the employee id carried in the request
context, never from request parameters.
"""

import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from workhub.core.context import RequestContext
from workhub.core.exceptions import UnauthorizedError
from workhub.models.board import Board
from workhub.models.employee import Employee, EmployeeTenant, Position, is_at_least
from workhub.models.project import Project
from workhub.models.task_state import TaskState

logger = logging.getLogger(__name__)

PLATFORM_AUTHORITIES = ("ROLE_PLATFORM_ADMIN", "ROLE_SUPER_ADMIN")


def check_tenant_access(ctx: RequestContext, required_tenant_id: uuid.UUID | None) -> None:
    """Fail unless the context's current tenant equals ``required_tenant_id``.

    A ``None`` requirement marks a tenant-agnostic resource and always passes.
    """
    if required_tenant_id is None:
        return

    current = ctx.current_tenant()
    if current is None:
        logger.warning(
            "Tenant access denied: no tenant selected (account=%s, required=%s)",
            ctx.account_id,
            required_tenant_id,
        )
        raise UnauthorizedError("Tenant context not set. Please select a tenant.")

    if current != required_tenant_id:
        logger.warning(
            "Tenant access denied: required %s but current is %s (account=%s)",
            required_tenant_id,
            current,
            ctx.account_id,
        )
        raise UnauthorizedError("Access denied. This resource belongs to a different tenant.")


def validate_entity_access(
    ctx: RequestContext,
    entity_tenant_id: uuid.UUID | None,
    entity_type: str = "Resource",
) -> None:
    try:
        check_tenant_access(ctx, entity_tenant_id)
    except UnauthorizedError:
        raise UnauthorizedError(f"{entity_type} access denied") from None


def is_platform_admin(ctx: RequestContext) -> bool:
    return ctx.has_authority(*PLATFORM_AUTHORITIES)


# ── Transitive ownership lookups ─────────────────────────────

async def tenant_of_board(session: AsyncSession, board_id: uuid.UUID) -> uuid.UUID | None:
    stmt = (
        select(Project.tenant_id)
        .join(Board, Board.project_id == Project.id)  # type: ignore[arg-type]
        .where(Board.id == board_id)
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def tenant_of_state(session: AsyncSession, state_id: uuid.UUID) -> uuid.UUID | None:
    stmt = (
        select(Project.tenant_id)
        .join(Board, Board.project_id == Project.id)  # type: ignore[arg-type]
        .join(TaskState, TaskState.board_id == Board.id)  # type: ignore[arg-type]
        .where(TaskState.id == state_id)
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def employee_tenant_ids(session: AsyncSession, employee_id: uuid.UUID) -> list[uuid.UUID]:
    stmt = (
        select(EmployeeTenant.tenant_id)
        .where(EmployeeTenant.employee_id == employee_id)
        .order_by(EmployeeTenant.created_at)  # type: ignore[arg-type]
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def is_member(session: AsyncSession, employee_id: uuid.UUID, tenant_id: uuid.UUID) -> bool:
    link = await session.get(EmployeeTenant, (employee_id, tenant_id))
    return link is not None


# ── Acting employee ──────────────────────────────────────────

async def acting_employee(ctx: RequestContext, session: AsyncSession) -> Employee:
    """The caller's own employee, verified live, active and in the current tenant."""
    employee_id = ctx.require_employee()
    tenant_id = ctx.require_tenant()

    stmt = select(Employee).where(
        Employee.id == employee_id,
        Employee.deleted.is_(False),  # type: ignore[attr-defined]
    )
    result = await session.execute(stmt)
    employee = result.scalar_one_or_none()

    if employee is None or not employee.is_active:
        logger.warning("Acting employee %s is missing or inactive", employee_id)
        raise UnauthorizedError("Current employee is not active")

    if not await is_member(session, employee.id, tenant_id):
        logger.warning(
            "Acting employee %s does not belong to tenant %s", employee_id, tenant_id
        )
        raise UnauthorizedError("Current employee does not belong to the selected tenant")

    return employee


async def require_rank(
    ctx: RequestContext, session: AsyncSession, minimum: Position
) -> Employee:
    employee = await acting_employee(ctx, session)
    if not is_at_least(employee.position, minimum):
        logger.warning(
            "Rank denied: employee %s is %s, needs at least %s",
            employee.id,
            employee.position,
            minimum,
        )
        raise UnauthorizedError(f"Requires position {minimum} or higher")
    return employee
