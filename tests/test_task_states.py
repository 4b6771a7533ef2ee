"""Board workflow states: defaults, uniqueness, deletion rules, copying."""

import pytest

from workhub.models.employee import Position


async def _states(client, member, board_id) -> dict[str, dict]:
    resp = await client.get(f"/v1/boards/{board_id}/states", headers=member.headers)
    assert resp.status_code == 200
    return {s["code"]: s for s in resp.json()}


async def _create_task(client, member, board_id, title="Task"):
    resp = await client.post(
        "/v1/tasks",
        json={"board_id": str(board_id), "title": title, "description": "Something"},
        headers=member.headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.mark.asyncio
async def test_new_board_gets_default_states(client, world):
    member = await world.member(await world.tenant())
    board = await world.board(member)

    states = await _states(client, member, board.id)
    assert set(states) == {"NEW", "IN_PROGRESS", "REVIEW", "DONE"}

    resp = await client.get(f"/v1/boards/{board.id}", headers=member.headers)
    assert set(resp.json()["states"]) == set(states)


@pytest.mark.asyncio
async def test_create_state_and_duplicate_code(client, world):
    member = await world.member(await world.tenant())
    board = await world.board(member)

    resp = await client.post(
        f"/v1/boards/{board.id}/states",
        json={"code": "BLOCKED", "name": "Blocked"},
        headers=member.headers,
    )
    assert resp.status_code == 201
    assert resp.json()["board_id"] == str(board.id)

    resp = await client.post(
        f"/v1/boards/{board.id}/states",
        json={"code": "BLOCKED", "name": "Blocked again"},
        headers=member.headers,
    )
    assert resp.status_code == 409
    assert resp.json()["code"] == "ALREADY_EXISTS"


@pytest.mark.asyncio
async def test_same_code_allowed_on_another_board(client, world):
    member = await world.member(await world.tenant())
    first = await world.board(member, "First")
    second = await world.board(member, "Second")

    for board in (first, second):
        resp = await client.post(
            f"/v1/boards/{board.id}/states",
            json={"code": "QA", "name": "QA"},
            headers=member.headers,
        )
        assert resp.status_code == 201


@pytest.mark.asyncio
async def test_new_state_cannot_be_deleted(client, world):
    member = await world.member(await world.tenant())
    board = await world.board(member)
    new_state = (await _states(client, member, board.id))["NEW"]

    resp = await client.delete(f"/v1/task-states/{new_state['id']}", headers=member.headers)
    assert resp.status_code == 400
    assert (await _states(client, member, board.id)).keys() >= {"NEW"}


@pytest.mark.asyncio
async def test_new_state_cannot_be_recoded(client, world):
    member = await world.member(await world.tenant())
    board = await world.board(member)
    new_state = (await _states(client, member, board.id))["NEW"]

    resp = await client.put(
        f"/v1/task-states/{new_state['id']}",
        json={"code": "FRESH"},
        headers=member.headers,
    )
    assert resp.status_code == 400

    resp = await client.put(
        f"/v1/task-states/{new_state['id']}",
        json={"name": "Fresh"},
        headers=member.headers,
    )
    assert resp.status_code == 200
    assert resp.json() == {**new_state, "name": "Fresh"}


@pytest.mark.asyncio
async def test_state_in_use_cannot_be_deleted(client, world):
    member = await world.member(await world.tenant())
    board = await world.board(member)
    task = await _create_task(client, member, board.id)
    resp = await client.put(
        f"/v1/tasks/{task['id']}/state", json={"state_code": "DONE"}, headers=member.headers
    )
    assert resp.status_code == 200
    done = (await _states(client, member, board.id))["DONE"]

    resp = await client.delete(f"/v1/task-states/{done['id']}", headers=member.headers)
    assert resp.status_code == 400
    assert "1 tasks" in resp.json()["detail"]


@pytest.mark.asyncio
async def test_state_referenced_only_by_deleted_tasks_can_be_deleted(client, world):
    member = await world.member(await world.tenant())
    board = await world.board(member)
    task = await _create_task(client, member, board.id)
    await client.put(
        f"/v1/tasks/{task['id']}/state", json={"state_code": "REVIEW"}, headers=member.headers
    )
    assert (await client.delete(f"/v1/tasks/{task['id']}", headers=member.headers)).status_code == 204
    review = (await _states(client, member, board.id))["REVIEW"]

    resp = await client.delete(f"/v1/task-states/{review['id']}", headers=member.headers)
    assert resp.status_code == 204
    assert "REVIEW" not in await _states(client, member, board.id)

    resp = await client.get(f"/v1/task-states/{review['id']}", headers=member.headers)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_deleted_code_stays_reserved(client, world):
    member = await world.member(await world.tenant())
    board = await world.board(member)
    review = (await _states(client, member, board.id))["REVIEW"]
    await client.delete(f"/v1/task-states/{review['id']}", headers=member.headers)

    resp = await client.post(
        f"/v1/boards/{board.id}/states",
        json={"code": "REVIEW", "name": "Review"},
        headers=member.headers,
    )
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_copy_state_to_board(client, world):
    member = await world.member(await world.tenant())
    source = await world.board(member, "Source")
    target = await world.board(member, "Target")
    created = await client.post(
        f"/v1/boards/{source.id}/states",
        json={"code": "QA", "name": "Quality"},
        headers=member.headers,
    )

    resp = await client.post(
        f"/v1/task-states/{created.json()['id']}/copy",
        json={"target_board_id": str(target.id)},
        headers=member.headers,
    )
    assert resp.status_code == 201
    copied = resp.json()
    assert copied["board_id"] == str(target.id)
    assert copied["code"] == "QA"
    assert copied["name"] == "Quality"

    resp = await client.post(
        f"/v1/task-states/{created.json()['id']}/copy",
        json={"target_board_id": str(target.id)},
        headers=member.headers,
    )
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_copy_to_foreign_board_is_denied(client, world):
    member = await world.member(await world.tenant())
    other = await world.member(await world.tenant())
    board = await world.board(member)
    foreign = await world.board(other)
    done = (await _states(client, member, board.id))["DONE"]

    resp = await client.post(
        f"/v1/task-states/{done['id']}/copy",
        json={"target_board_id": str(foreign.id)},
        headers=member.headers,
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_state_writes_require_manager(client, world):
    tenant = await world.tenant()
    owner = await world.member(tenant)
    lead = await world.member(tenant, Position.TEAM_LEAD)
    board = await world.board(owner)

    resp = await client.post(
        f"/v1/boards/{board.id}/states",
        json={"code": "QA", "name": "QA"},
        headers=lead.headers,
    )
    assert resp.status_code == 403

    resp = await client.get(f"/v1/boards/{board.id}/states", headers=lead.headers)
    assert resp.status_code == 200
