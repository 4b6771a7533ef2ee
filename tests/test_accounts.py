"""Own-profile management and platform-level account administration."""

import pytest

from workhub.core.security import verify_password
from workhub.models.account import Account
from workhub.services import roles


@pytest.mark.asyncio
async def test_update_own_profile(client, world):
    account = await world.account()
    headers = await world.headers(account)

    resp = await client.patch(
        "/v1/accounts/me", json={"first_name": "Grace", "last_name": "Hopper"}, headers=headers
    )
    assert resp.status_code == 200
    assert resp.json()["first_name"] == "Grace"
    assert resp.json()["last_name"] == "Hopper"
    assert [r["code"] for r in resp.json()["roles"]] == ["USER"]


@pytest.mark.asyncio
async def test_change_password(client, session, world):
    account = await world.account()
    headers = await world.headers(account)

    resp = await client.patch(
        "/v1/accounts/me/security",
        json={
            "old_password": world.password,
            "new_password": "Fresh#4567",
            "confirm_password": "Fresh#4567",
        },
        headers=headers,
    )
    assert resp.status_code == 200

    stored = await session.get(Account, account.id)
    assert verify_password("Fresh#4567", stored.password_hash)

    resp = await client.post(
        "/v1/auth/login", json={"phone_num": account.phone_num, "password": "Fresh#4567"}
    )
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_change_password_with_wrong_old_password(client, world):
    account = await world.account()
    headers = await world.headers(account)

    resp = await client.patch(
        "/v1/accounts/me/security",
        json={"old_password": "Wrong#0000", "new_password": "Fresh#4567", "confirm_password": "Fresh#4567"},
        headers=headers,
    )
    assert resp.status_code == 400
    assert resp.json()["code"] == "INVALID_PASSWORD"


@pytest.mark.asyncio
async def test_change_password_confirmation_mismatch(client, world):
    account = await world.account()
    headers = await world.headers(account)

    resp = await client.patch(
        "/v1/accounts/me/security",
        json={"old_password": world.password, "new_password": "Fresh#4567", "confirm_password": "Fresh#4568"},
        headers=headers,
    )
    assert resp.status_code == 400
    assert resp.json()["code"] == "PASSWORD_MISMATCH"


@pytest.mark.asyncio
async def test_change_phone_to_taken_number(client, world):
    taken = await world.account()
    account = await world.account()
    headers = await world.headers(account)

    resp = await client.patch(
        "/v1/accounts/me/security", json={"phone_num": taken.phone_num}, headers=headers
    )
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_admin_endpoints_require_platform_authority(client, world):
    account = await world.account()
    headers = await world.headers(account)

    assert (await client.get("/v1/accounts", headers=headers)).status_code == 403
    assert (await client.get(f"/v1/accounts/{account.id}", headers=headers)).status_code == 403


@pytest.mark.asyncio
async def test_platform_admin_looks_up_accounts(client, world):
    admin = await world.platform_admin()
    account = await world.account(first_name="Linus")

    resp = await client.get(f"/v1/accounts/by-phone/{account.phone_num}", headers=admin)
    assert resp.status_code == 200
    assert resp.json()["id"] == str(account.id)

    resp = await client.get(f"/v1/accounts/{account.id}", headers=admin)
    assert resp.json()["first_name"] == "Linus"

    resp = await client.get("/v1/accounts/by-phone/998000000000", headers=admin)
    assert resp.status_code == 404

    listed = await client.get("/v1/accounts", headers=admin)
    assert str(account.id) in {a["id"] for a in listed.json()}


@pytest.mark.asyncio
async def test_super_admin_grants_role(client, world):
    admin = await world.platform_admin()
    account = await world.account()

    resp = await client.post(
        f"/v1/accounts/{account.id}/roles", json={"role_code": "MANAGER"}, headers=admin
    )
    assert resp.status_code == 200
    assert {r["code"] for r in resp.json()["roles"]} == {"USER", "MANAGER"}

    # Granting twice is idempotent
    resp = await client.post(
        f"/v1/accounts/{account.id}/roles", json={"role_code": "MANAGER"}, headers=admin
    )
    assert {r["code"] for r in resp.json()["roles"]} == {"USER", "MANAGER"}

    resp = await client.post(
        f"/v1/accounts/{account.id}/roles", json={"role_code": "NOPE"}, headers=admin
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_platform_admin_without_super_admin_cannot_grant(client, world):
    platform = await world.account(roles.DEFAULT_ROLE_CODE, "PLATFORM_ADMIN")
    headers = await world.headers(platform)
    account = await world.account()

    resp = await client.post(
        f"/v1/accounts/{account.id}/roles", json={"role_code": "MANAGER"}, headers=headers
    )
    assert resp.status_code == 403

    resp = await client.get(f"/v1/accounts/{account.id}", headers=headers)
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_deleted_account_cannot_log_in(client, world):
    admin = await world.platform_admin()
    account = await world.account()

    assert (await client.delete(f"/v1/accounts/{account.id}", headers=admin)).status_code == 204
    assert (await client.get(f"/v1/accounts/{account.id}", headers=admin)).status_code == 404

    resp = await client.post(
        "/v1/auth/login", json={"phone_num": account.phone_num, "password": world.password}
    )
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_authorities_include_role_permissions(session, world):
    account = await world.account()
    authorities = await roles.resolve_authorities(session, account.id)
    assert authorities[0] == "ROLE_USER"
    assert "TASK_READ" in authorities
    assert "TENANT_DELETE" not in authorities


@pytest.mark.asyncio
async def test_seed_is_idempotent(session, world):
    await roles.seed_security_data(session)
    owner = await roles.get_by_code(session, "OWNER")
    assert owner.name == "Owner"

    account = await world.account("OWNER")
    read = await roles.roles_read_for(session, account.id)
    assert [r.code for r in read] == ["OWNER"]
    assert len(read[0].permissions) == len(roles.PERMISSIONS)
