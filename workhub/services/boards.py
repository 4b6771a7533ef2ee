"""Board CRUD. New boards are seeded with the default task states."""

import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from workhub.core.context import RequestContext
from workhub.core.exceptions import AlreadyExistsError
from workhub.models.board import Board, BoardCreate, BoardRead, BoardUpdate
from workhub.models.task_state import DEFAULT_TASK_STATES, TaskState
from workhub.services import cascade, projects, repository, tenant_guard

logger = logging.getLogger(__name__)


async def to_read(session: AsyncSession, board: Board) -> BoardRead:
    states = await repository.list_live(
        session, TaskState, TaskState.board_id == board.id, order_by=TaskState.created_at
    )
    return BoardRead(
        id=board.id,
        project_id=board.project_id,
        name=board.name,
        description=board.description,
        is_active=board.is_active,
        states=[s.code for s in states],
        created_at=board.created_at,
    )


async def _check_name_unique(
    session: AsyncSession, name: str, project_id: uuid.UUID, exclude_id: uuid.UUID | None = None
) -> None:
    criteria = [Board.name == name, Board.project_id == project_id]
    if exclude_id is not None:
        criteria.append(Board.id != exclude_id)
    if await repository.exists(session, Board, *criteria):
        raise AlreadyExistsError(f"Board with name '{name}' already exists")


async def get_board(ctx: RequestContext, session: AsyncSession, board_id: uuid.UUID) -> Board:
    board = await repository.get_live_or_404(session, Board, board_id, "Board")
    tenant_id = await tenant_guard.tenant_of_board(session, board.id)
    tenant_guard.validate_entity_access(ctx, tenant_id, "Board")
    return board


async def create(ctx: RequestContext, session: AsyncSession, body: BoardCreate) -> BoardRead:
    project = await projects.get_project(ctx, session, body.project_id)
    await _check_name_unique(session, body.name, project.id)

    board = Board(name=body.name, description=body.description, project_id=project.id)
    session.add(board)
    await session.flush()
    for code, name in DEFAULT_TASK_STATES:
        session.add(TaskState(board_id=board.id, code=code, name=name))
    await session.commit()

    logger.info("Board %s created in project %s", board.id, project.id)
    return await to_read(session, board)


async def get(ctx: RequestContext, session: AsyncSession, board_id: uuid.UUID) -> BoardRead:
    return await to_read(session, await get_board(ctx, session, board_id))


async def list_by_project(
    ctx: RequestContext, session: AsyncSession, project_id: uuid.UUID
) -> list[BoardRead]:
    project = await projects.get_project(ctx, session, project_id)
    boards = await repository.list_live(
        session, Board, Board.project_id == project.id, order_by=Board.name
    )
    return [await to_read(session, b) for b in boards]


async def update(
    ctx: RequestContext, session: AsyncSession, board_id: uuid.UUID, body: BoardUpdate
) -> BoardRead:
    board = await get_board(ctx, session, board_id)
    data = body.model_dump(exclude_unset=True, exclude_none=True)
    if "name" in data:
        await _check_name_unique(session, data["name"], board.project_id, exclude_id=board.id)

    for field, value in data.items():
        setattr(board, field, value)
    repository.touch(session, board)
    await session.commit()
    return await to_read(session, board)


async def delete(ctx: RequestContext, session: AsyncSession, board_id: uuid.UUID) -> None:
    board = await get_board(ctx, session, board_id)
    await cascade.delete_board_tree(session, board.id)
    await session.commit()
    logger.info("Board %s deleted with its tasks and states", board_id)
