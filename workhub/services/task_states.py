"""Board-scoped workflow states.

A state code is unique per board (soft-deleted rows keep their code), the
``NEW`` state is the entry point for every task and can never be removed
or re-coded, and a state still referenced by a live task cannot be deleted.
"""

import logging
import uuid

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from workhub.core.context import RequestContext
from workhub.core.exceptions import AlreadyExistsError, BadRequestError, NotFoundError
from workhub.models.task import Task
from workhub.models.task_state import (
    NEW_STATE_CODE,
    TaskState,
    TaskStateCreate,
    TaskStateRead,
    TaskStateUpdate,
)
from workhub.services import boards, repository, tenant_guard

logger = logging.getLogger(__name__)


def to_read(state: TaskState) -> TaskStateRead:
    return TaskStateRead.model_validate(state)


async def _check_code_unique(session: AsyncSession, board_id: uuid.UUID, code: str) -> None:
    stmt = (
        select(func.count())
        .select_from(TaskState)
        .where(TaskState.board_id == board_id, TaskState.code == code)
    )
    if (await session.execute(stmt)).scalar_one() > 0:
        raise AlreadyExistsError(f"State with code {code} already exists")


async def get_state(ctx: RequestContext, session: AsyncSession, state_id: uuid.UUID) -> TaskState:
    state = await repository.get_live_or_404(session, TaskState, state_id, "TaskState")
    tenant_id = await tenant_guard.tenant_of_state(session, state.id)
    tenant_guard.validate_entity_access(ctx, tenant_id, "TaskState")
    return state


async def get_by_code(session: AsyncSession, board_id: uuid.UUID, code: str) -> TaskState:
    """Look a code up within one board. Callers have already authorized the board."""
    stmt = select(TaskState).where(
        TaskState.board_id == board_id,
        TaskState.code == code,
        TaskState.deleted.is_(False),  # type: ignore[attr-defined]
    )
    state = (await session.execute(stmt)).scalar_one_or_none()
    if state is None:
        raise NotFoundError(f"State not found with code: {code}")
    return state


async def list_by_board(
    ctx: RequestContext, session: AsyncSession, board_id: uuid.UUID
) -> list[TaskStateRead]:
    board = await boards.get_board(ctx, session, board_id)
    states = await repository.list_live(
        session, TaskState, TaskState.board_id == board.id, order_by=TaskState.created_at
    )
    return [to_read(s) for s in states]


async def get(ctx: RequestContext, session: AsyncSession, state_id: uuid.UUID) -> TaskStateRead:
    return to_read(await get_state(ctx, session, state_id))


async def create(
    ctx: RequestContext, session: AsyncSession, board_id: uuid.UUID, body: TaskStateCreate
) -> TaskStateRead:
    board = await boards.get_board(ctx, session, board_id)
    await _check_code_unique(session, board.id, body.code)

    state = TaskState(board_id=board.id, code=body.code, name=body.name)
    session.add(state)
    await repository.commit_unique(session, f"State with code {body.code} already exists")
    logger.info("State %s added to board %s", state.code, board.id)
    return to_read(state)


async def copy_to_board(
    ctx: RequestContext, session: AsyncSession, state_id: uuid.UUID, target_board_id: uuid.UUID
) -> TaskStateRead:
    original = await get_state(ctx, session, state_id)
    target = await boards.get_board(ctx, session, target_board_id)
    await _check_code_unique(session, target.id, original.code)

    copied = TaskState(board_id=target.id, code=original.code, name=original.name)
    session.add(copied)
    await repository.commit_unique(session, f"State with code {original.code} already exists")
    logger.info("State %s copied from board %s to %s", original.code, original.board_id, target.id)
    return to_read(copied)


async def update(
    ctx: RequestContext, session: AsyncSession, state_id: uuid.UUID, body: TaskStateUpdate
) -> TaskStateRead:
    state = await get_state(ctx, session, state_id)

    if body.code is not None and body.code != state.code:
        if state.code == NEW_STATE_CODE:
            raise BadRequestError("The default 'NEW' state cannot be re-coded")
        await _check_code_unique(session, state.board_id, body.code)
        state.code = body.code

    if body.name is not None:
        state.name = body.name

    repository.touch(session, state)
    await repository.commit_unique(session, f"State with code {state.code} already exists")
    return to_read(state)


async def count_live_tasks(session: AsyncSession, state_id: uuid.UUID) -> int:
    stmt = (
        select(func.count())
        .select_from(Task)
        .where(Task.state_id == state_id, Task.deleted.is_(False))  # type: ignore[attr-defined]
    )
    return (await session.execute(stmt)).scalar_one()


async def delete(ctx: RequestContext, session: AsyncSession, state_id: uuid.UUID) -> None:
    state = await get_state(ctx, session, state_id)

    if state.code == NEW_STATE_CODE:
        raise BadRequestError("Default 'NEW' state cannot be deleted")

    task_count = await count_live_tasks(session, state.id)
    if task_count > 0:
        raise BadRequestError(
            f"Cannot delete state. Move {task_count} tasks to another state first."
        )

    repository.soft_delete(session, state)
    await session.commit()
    logger.info("State %s deleted from board %s", state.code, state.board_id)
