"""Soft-delete cascades: tenant -> projects -> boards -> tasks / task states."""

import logging
import uuid

from sqlalchemy import delete, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from workhub.models.base import utcnow
from workhub.models.board import Board
from workhub.models.employee import EmployeeTenant
from workhub.models.project import Project
from workhub.models.task import Task
from workhub.models.task_state import TaskState

logger = logging.getLogger(__name__)


async def _live_ids(session: AsyncSession, model, *criteria) -> list[uuid.UUID]:
    stmt = select(model.id).where(model.deleted.is_(False), *criteria)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def delete_board_tree(session: AsyncSession, board_id: uuid.UUID) -> None:
    now = utcnow()
    for model in (Task, TaskState, Board):
        column = model.id if model is Board else model.board_id
        await session.execute(
            update(model)
            .where(column == board_id, model.deleted.is_(False))
            .values(deleted=True, updated_at=now)
        )


async def delete_project_tree(session: AsyncSession, project_id: uuid.UUID) -> None:
    for board_id in await _live_ids(session, Board, Board.project_id == project_id):
        await delete_board_tree(session, board_id)
    await session.execute(
        update(Project)
        .where(Project.id == project_id, Project.deleted.is_(False))
        .values(deleted=True, updated_at=utcnow())
    )


async def delete_tenant_tree(session: AsyncSession, tenant_id: uuid.UUID) -> None:
    """Projects below the tenant go; employees stay but lose the membership."""
    project_ids = await _live_ids(session, Project, Project.tenant_id == tenant_id)
    for project_id in project_ids:
        await delete_project_tree(session, project_id)
    await session.execute(delete(EmployeeTenant).where(EmployeeTenant.tenant_id == tenant_id))
    logger.info("Cascaded delete of tenant %s over %d projects", tenant_id, len(project_ids))
