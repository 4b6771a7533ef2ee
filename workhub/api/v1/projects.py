"""Project CRUD: tenant-scoped."""

import uuid

from fastapi import APIRouter, Depends, status

from workhub.api.deps import Ctx, RequireRank, Session
from workhub.models.board import BoardRead
from workhub.models.employee import Position
from workhub.models.project import ProjectCreate, ProjectRead, ProjectUpdate
from workhub.services import boards, projects

router = APIRouter(prefix="/projects", tags=["projects"])

_read = [Depends(RequireRank(Position.EMPLOYEE))]
_write = [Depends(RequireRank(Position.ADMIN))]


@router.post(
    "", response_model=ProjectRead, status_code=status.HTTP_201_CREATED, dependencies=_write
)
async def create_project(body: ProjectCreate, ctx: Ctx, session: Session) -> ProjectRead:
    return await projects.create(ctx, session, body)


@router.get("/{project_id}", response_model=ProjectRead, dependencies=_read)
async def get_project(project_id: uuid.UUID, ctx: Ctx, session: Session) -> ProjectRead:
    return await projects.get(ctx, session, project_id)


@router.put("/{project_id}", response_model=ProjectRead, dependencies=_write)
async def update_project(
    project_id: uuid.UUID, body: ProjectUpdate, ctx: Ctx, session: Session
) -> ProjectRead:
    return await projects.update(ctx, session, project_id, body)


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=_write)
async def delete_project(project_id: uuid.UUID, ctx: Ctx, session: Session) -> None:
    await projects.delete(ctx, session, project_id)


@router.get("/{project_id}/boards", response_model=list[BoardRead], dependencies=_read)
async def list_boards(project_id: uuid.UUID, ctx: Ctx, session: Session) -> list[BoardRead]:
    return await boards.list_by_project(ctx, session, project_id)
