"""Board CRUD plus the board-scoped state and task listings."""

import uuid

from fastapi import APIRouter, Depends, status

from workhub.api.deps import Ctx, RequireRank, Session
from workhub.models.board import BoardCreate, BoardRead, BoardUpdate
from workhub.models.employee import Position
from workhub.models.task import TaskRead
from workhub.models.task_state import TaskStateCreate, TaskStateRead
from workhub.services import boards, task_states, tasks

router = APIRouter(prefix="/boards", tags=["boards"])

_read = [Depends(RequireRank(Position.EMPLOYEE))]
_write = [Depends(RequireRank(Position.MANAGER))]


@router.post(
    "", response_model=BoardRead, status_code=status.HTTP_201_CREATED, dependencies=_write
)
async def create_board(body: BoardCreate, ctx: Ctx, session: Session) -> BoardRead:
    return await boards.create(ctx, session, body)


@router.get("/{board_id}", response_model=BoardRead, dependencies=_read)
async def get_board(board_id: uuid.UUID, ctx: Ctx, session: Session) -> BoardRead:
    return await boards.get(ctx, session, board_id)


@router.put("/{board_id}", response_model=BoardRead, dependencies=_write)
async def update_board(
    board_id: uuid.UUID, body: BoardUpdate, ctx: Ctx, session: Session
) -> BoardRead:
    return await boards.update(ctx, session, board_id, body)


@router.delete("/{board_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=_write)
async def delete_board(board_id: uuid.UUID, ctx: Ctx, session: Session) -> None:
    await boards.delete(ctx, session, board_id)


# ── States & tasks on a board ────────────────────────────────

@router.get("/{board_id}/states", response_model=list[TaskStateRead], dependencies=_read)
async def list_states(board_id: uuid.UUID, ctx: Ctx, session: Session) -> list[TaskStateRead]:
    return await task_states.list_by_board(ctx, session, board_id)


@router.post(
    "/{board_id}/states",
    response_model=TaskStateRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=_write,
)
async def create_state(
    board_id: uuid.UUID, body: TaskStateCreate, ctx: Ctx, session: Session
) -> TaskStateRead:
    return await task_states.create(ctx, session, board_id, body)


@router.get("/{board_id}/tasks", response_model=list[TaskRead], dependencies=_read)
async def list_tasks(board_id: uuid.UUID, ctx: Ctx, session: Session) -> list[TaskRead]:
    return await tasks.list_by_board(ctx, session, board_id)
