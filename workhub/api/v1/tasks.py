"""Task endpoints: CRUD, state transitions, assignment and history."""

import uuid

from fastapi import APIRouter, Depends, status

from workhub.api.deps import Ctx, RequireRank, Session
from workhub.models.employee import Position
from workhub.models.task import (
    TaskActionRead,
    TaskCreate,
    TaskRead,
    TaskStateChange,
    TaskUpdate,
)
from workhub.services import tasks

router = APIRouter(prefix="/tasks", tags=["tasks"])

_read = [Depends(RequireRank(Position.EMPLOYEE))]
_write = [Depends(RequireRank(Position.TEAM_LEAD))]


@router.post(
    "", response_model=TaskRead, status_code=status.HTTP_201_CREATED, dependencies=_write
)
async def create_task(body: TaskCreate, ctx: Ctx, session: Session) -> TaskRead:
    return await tasks.create(ctx, session, body)


@router.get("/my", response_model=list[TaskRead], dependencies=_read)
async def my_tasks(ctx: Ctx, session: Session) -> list[TaskRead]:
    """Tasks assigned to the caller in the current tenant."""
    return await tasks.my_tasks(ctx, session)


@router.get("/{task_id}", response_model=TaskRead, dependencies=_read)
async def get_task(task_id: uuid.UUID, ctx: Ctx, session: Session) -> TaskRead:
    return await tasks.get(ctx, session, task_id)


@router.put("/{task_id}", response_model=TaskRead, dependencies=_write)
async def update_task(
    task_id: uuid.UUID, body: TaskUpdate, ctx: Ctx, session: Session
) -> TaskRead:
    return await tasks.update(ctx, session, task_id, body)


@router.put("/{task_id}/state", response_model=TaskRead, dependencies=_write)
async def change_state(
    task_id: uuid.UUID, body: TaskStateChange, ctx: Ctx, session: Session
) -> TaskRead:
    return await tasks.change_state(ctx, session, task_id, body.state_code)


@router.post("/{task_id}/assignees/{employee_id}", response_model=TaskRead, dependencies=_write)
async def assign_employee(
    task_id: uuid.UUID, employee_id: uuid.UUID, ctx: Ctx, session: Session
) -> TaskRead:
    return await tasks.assign(ctx, session, task_id, employee_id)


@router.delete("/{task_id}/assignees/{employee_id}", response_model=TaskRead, dependencies=_write)
async def unassign_employee(
    task_id: uuid.UUID, employee_id: uuid.UUID, ctx: Ctx, session: Session
) -> TaskRead:
    return await tasks.unassign(ctx, session, task_id, employee_id)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=_write)
async def delete_task(task_id: uuid.UUID, ctx: Ctx, session: Session) -> None:
    await tasks.delete(ctx, session, task_id)


@router.get("/{task_id}/actions", response_model=list[TaskActionRead], dependencies=_read)
async def task_history(task_id: uuid.UUID, ctx: Ctx, session: Session) -> list[TaskActionRead]:
    return await tasks.history(ctx, session, task_id)
