"""Task-state endpoints. Creation lives under /boards/{id}/states."""

import uuid

from fastapi import APIRouter, Depends, status

from workhub.api.deps import Ctx, RequireRank, Session
from workhub.models.employee import Position
from workhub.models.task import TaskRead
from workhub.models.task_state import TaskStateCopy, TaskStateRead, TaskStateUpdate
from workhub.services import task_states, tasks

router = APIRouter(prefix="/task-states", tags=["task-states"])

_read = [Depends(RequireRank(Position.EMPLOYEE))]
_write = [Depends(RequireRank(Position.MANAGER))]


@router.get("/{state_id}", response_model=TaskStateRead, dependencies=_read)
async def get_state(state_id: uuid.UUID, ctx: Ctx, session: Session) -> TaskStateRead:
    return await task_states.get(ctx, session, state_id)


@router.put("/{state_id}", response_model=TaskStateRead, dependencies=_write)
async def update_state(
    state_id: uuid.UUID, body: TaskStateUpdate, ctx: Ctx, session: Session
) -> TaskStateRead:
    return await task_states.update(ctx, session, state_id, body)


@router.delete("/{state_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=_write)
async def delete_state(state_id: uuid.UUID, ctx: Ctx, session: Session) -> None:
    await task_states.delete(ctx, session, state_id)


@router.post(
    "/{state_id}/copy",
    response_model=TaskStateRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=_write,
)
async def copy_state(
    state_id: uuid.UUID, body: TaskStateCopy, ctx: Ctx, session: Session
) -> TaskStateRead:
    return await task_states.copy_to_board(ctx, session, state_id, body.target_board_id)


@router.get("/{state_id}/tasks", response_model=list[TaskRead], dependencies=_read)
async def list_tasks(state_id: uuid.UUID, ctx: Ctx, session: Session) -> list[TaskRead]:
    return await tasks.list_by_state(ctx, session, state_id)
