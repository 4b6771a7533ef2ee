"""Tenant isolation: cross-tenant reads are denied, missing ids are 404."""

import uuid

import pytest

from workhub.core.context import RequestContext
from workhub.core.exceptions import (
    ContextNotSetError,
    NotFoundError,
    UnauthorizedError,
)
from workhub.models.employee import Position
from workhub.models.task import TaskCreate
from workhub.services import tasks, tenant_guard


def test_none_owner_always_passes():
    tenant_guard.check_tenant_access(RequestContext.for_account(uuid.uuid4()), None)


def test_no_selected_tenant_is_denied():
    ctx = RequestContext.for_account(uuid.uuid4())
    with pytest.raises(UnauthorizedError):
        tenant_guard.check_tenant_access(ctx, uuid.uuid4())


def test_unset_context_is_context_not_set():
    with pytest.raises(ContextNotSetError):
        tenant_guard.check_tenant_access(RequestContext(), uuid.uuid4())


def test_mismatched_tenant_names_entity_type():
    ctx = RequestContext.for_account(uuid.uuid4(), uuid.uuid4())
    with pytest.raises(UnauthorizedError, match="Board access denied"):
        tenant_guard.validate_entity_access(ctx, uuid.uuid4(), "Board")


@pytest.mark.asyncio
async def test_task_in_other_tenant_is_denied(session, world):
    tenant_a = await world.tenant("Alpha")
    tenant_b = await world.tenant("Bravo")
    owner_a = await world.member(tenant_a)
    owner_b = await world.member(tenant_b)
    board = await world.board(owner_a)
    task = await tasks.create(
        owner_a.ctx, session, TaskCreate(board_id=board.id, title="T", description="d")
    )

    with pytest.raises(UnauthorizedError):
        await tasks.get(owner_b.ctx, session, task.id)

    intern_a = await world.member(tenant_a, Position.INTERN)
    read = await tasks.get(intern_a.ctx, session, task.id)
    assert read.id == task.id


@pytest.mark.asyncio
async def test_missing_task_is_not_found_even_for_other_tenant(session, world):
    member = await world.member(await world.tenant())
    with pytest.raises(NotFoundError):
        await tasks.get(member.ctx, session, uuid.uuid4())


@pytest.mark.asyncio
async def test_cross_tenant_http_read_is_forbidden(client, world):
    tenant_a = await world.tenant()
    tenant_b = await world.tenant()
    owner_a = await world.member(tenant_a)
    owner_b = await world.member(tenant_b)
    board = await world.board(owner_a)

    resp = await client.get(f"/v1/boards/{board.id}", headers=owner_b.headers)
    assert resp.status_code == 403
    assert resp.json()["code"] == "UNAUTHORIZED"

    resp = await client.get(f"/v1/boards/{uuid.uuid4()}", headers=owner_b.headers)
    assert resp.status_code == 404
    assert resp.json()["code"] == "NOT_FOUND"

    resp = await client.get(f"/v1/boards/{board.id}", headers=owner_a.headers)
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_rank_comes_from_the_acting_employee(session, world):
    tenant = await world.tenant()
    intern = await world.member(tenant, Position.INTERN)

    with pytest.raises(UnauthorizedError):
        await tenant_guard.require_rank(intern.ctx, session, Position.EMPLOYEE)
    employee = await tenant_guard.require_rank(intern.ctx, session, Position.INTERN)
    assert employee.id == intern.employee.id


@pytest.mark.asyncio
async def test_inactive_employee_has_no_rank(session, world):
    tenant = await world.tenant()
    owner = await world.member(tenant)
    owner.employee.is_active = False
    session.add(owner.employee)
    await session.commit()

    with pytest.raises(UnauthorizedError):
        await tenant_guard.acting_employee(owner.ctx, session)


@pytest.mark.asyncio
async def test_employee_outside_selected_tenant_has_no_rank(session, world):
    tenant_a = await world.tenant()
    tenant_b = await world.tenant()
    owner = await world.member(tenant_a)
    ctx = RequestContext.for_account(owner.account.id, tenant_b.id, owner.employee.id)

    with pytest.raises(UnauthorizedError):
        await tenant_guard.acting_employee(ctx, session)
