"""Tenant lifecycle, subscription seat caps and delete cascades."""

import pytest

from workhub.models.employee import EmployeeTenant, Position
from workhub.models.tenant import TenantPlan


@pytest.mark.asyncio
async def test_platform_admin_creates_tenant(client, world):
    admin = await world.platform_admin()
    resp = await client.post(
        "/v1/tenants", json={"name": "Acme", "tagline": "We make things"}, headers=admin
    )
    assert resp.status_code == 201
    data = resp.json()
    assert data["subscription_plan"] == "FREE"
    assert data["max_users"] == 5
    assert data["is_active"] is True

    listed = await client.get("/v1/tenants", headers=admin)
    assert [t["name"] for t in listed.json()] == ["Acme"]


@pytest.mark.asyncio
async def test_duplicate_name_is_case_insensitive(client, world):
    admin = await world.platform_admin()
    assert (await client.post("/v1/tenants", json={"name": "Acme"}, headers=admin)).status_code == 201

    resp = await client.post("/v1/tenants", json={"name": "ACME"}, headers=admin)
    assert resp.status_code == 409
    assert resp.json()["code"] == "ALREADY_EXISTS"


@pytest.mark.asyncio
async def test_regular_user_cannot_create_tenant(client, world):
    member = await world.member(await world.tenant())
    resp = await client.post("/v1/tenants", json={"name": "Mine"}, headers=member.headers)
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_member_reads_own_tenant_only(client, world):
    tenant = await world.tenant("Home")
    other = await world.tenant("Away")
    member = await world.member(tenant, Position.INTERN)

    resp = await client.get(f"/v1/tenants/{tenant.id}", headers=member.headers)
    assert resp.status_code == 200
    assert resp.json()["name"] == "Home"

    resp = await client.get(f"/v1/tenants/{other.id}", headers=member.headers)
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_removed_member_cannot_read_tenant(client, session, world):
    tenant = await world.tenant("Left behind")
    member = await world.member(tenant, Position.EMPLOYEE)

    resp = await client.get(f"/v1/tenants/{tenant.id}", headers=member.headers)
    assert resp.status_code == 200

    link = await session.get(EmployeeTenant, (member.employee.id, tenant.id))
    await session.delete(link)
    await session.commit()

    # The token still names the tenant, but the membership is gone
    resp = await client.get(f"/v1/tenants/{tenant.id}", headers=member.headers)
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_update_requires_admin(client, world):
    tenant = await world.tenant()
    manager = await world.member(tenant, Position.MANAGER)
    admin = await world.member(tenant, Position.ADMIN)

    resp = await client.put(
        f"/v1/tenants/{tenant.id}", json={"tagline": "New"}, headers=manager.headers
    )
    assert resp.status_code == 403

    resp = await client.put(
        f"/v1/tenants/{tenant.id}", json={"tagline": "New"}, headers=admin.headers
    )
    assert resp.status_code == 200
    assert resp.json()["tagline"] == "New"


@pytest.mark.asyncio
async def test_upgrade_plan_raises_seat_cap(client, world):
    admin = await world.platform_admin()
    tenant = await world.tenant()

    resp = await client.put(
        f"/v1/tenants/{tenant.id}/plan", json={"new_plan": "PRO"}, headers=admin
    )
    assert resp.status_code == 200
    assert resp.json()["subscription_plan"] == "PRO"
    assert resp.json()["max_users"] == 50


@pytest.mark.asyncio
async def test_downgrade_over_limit_is_refused_and_plan_kept(client, world):
    admin = await world.platform_admin()
    tenant = await world.tenant(plan=TenantPlan.PRO)
    for _ in range(TenantPlan.FREE.max_users + 1):
        await world.member(tenant, Position.EMPLOYEE)

    resp = await client.put(
        f"/v1/tenants/{tenant.id}/plan", json={"new_plan": "FREE"}, headers=admin
    )
    assert resp.status_code == 409
    assert resp.json()["code"] == "SUBSCRIPTION_LIMIT_EXCEEDED"

    current = await client.get(f"/v1/tenants/{tenant.id}", headers=admin)
    assert current.json()["subscription_plan"] == "PRO"
    assert current.json()["max_users"] == 50


@pytest.mark.asyncio
async def test_inactive_employees_do_not_count_against_cap(client, session, world):
    admin = await world.platform_admin()
    tenant = await world.tenant(plan=TenantPlan.PRO)
    members = [await world.member(tenant, Position.EMPLOYEE) for _ in range(6)]
    members[0].employee.is_active = False
    session.add(members[0].employee)
    await session.commit()

    resp = await client.put(
        f"/v1/tenants/{tenant.id}/plan", json={"new_plan": "FREE"}, headers=admin
    )
    assert resp.status_code == 200
    assert resp.json()["max_users"] == 5


@pytest.mark.asyncio
async def test_employee_creation_respects_seat_cap(client, world):
    admin = await world.platform_admin()
    tenant = await world.tenant()
    for _ in range(TenantPlan.FREE.max_users):
        await world.member(tenant, Position.EMPLOYEE)
    newcomer = await world.account()

    resp = await client.post(
        "/v1/employees",
        json={"account_id": str(newcomer.id), "tenant_ids": [str(tenant.id)]},
        headers=admin,
    )
    assert resp.status_code == 409
    assert resp.json()["code"] == "SUBSCRIPTION_LIMIT_EXCEEDED"


@pytest.mark.asyncio
async def test_delete_tenant_cascades(client, world):
    admin = await world.platform_admin()
    tenant = await world.tenant()
    owner = await world.member(tenant)
    board = await world.board(owner)
    task = await client.post(
        "/v1/tasks",
        json={"board_id": str(board.id), "title": "Doomed", "description": "x"},
        headers=owner.headers,
    )
    assert task.status_code == 201

    resp = await client.delete(f"/v1/tenants/{tenant.id}", headers=admin)
    assert resp.status_code == 204

    assert (await client.get(f"/v1/tenants/{tenant.id}", headers=admin)).status_code == 404
    assert [t["id"] for t in (await client.get("/v1/tenants", headers=admin)).json()] == []

    # The employee survives but no longer belongs anywhere
    me = await client.get("/v1/auth/me", headers=owner.headers)
    assert me.status_code == 200
    assert me.json()["tenants"] == []

    # The old token no longer passes the membership check
    resp = await client.get(f"/v1/tasks/{task.json()['id']}", headers=owner.headers)
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_list_tenant_employees_and_projects(client, world):
    tenant = await world.tenant()
    owner = await world.member(tenant)
    intern = await world.member(tenant, Position.INTERN)
    await world.board(owner)

    resp = await client.get(f"/v1/tenants/{tenant.id}/employees", headers=owner.headers)
    assert resp.status_code == 200
    assert {e["id"] for e in resp.json()} == {str(owner.employee.id), str(intern.employee.id)}

    resp = await client.get(f"/v1/tenants/{tenant.id}/employees", headers=intern.headers)
    assert resp.status_code == 403

    resp = await client.get(f"/v1/tenants/{tenant.id}/projects", headers=owner.headers)
    assert len(resp.json()) == 1
