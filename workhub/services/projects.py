"""Project CRUD scoped to the owning tenant."""

import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from workhub.core.context import RequestContext
from workhub.core.exceptions import AlreadyExistsError
from workhub.models.project import Project, ProjectCreate, ProjectRead, ProjectUpdate
from workhub.models.tenant import Tenant
from workhub.services import cascade, repository, tenant_guard

logger = logging.getLogger(__name__)


def to_read(project: Project) -> ProjectRead:
    return ProjectRead.model_validate(project)


async def _check_name_unique(
    session: AsyncSession, name: str, tenant_id: uuid.UUID, exclude_id: uuid.UUID | None = None
) -> None:
    criteria = [Project.name == name, Project.tenant_id == tenant_id]
    if exclude_id is not None:
        criteria.append(Project.id != exclude_id)
    if await repository.exists(session, Project, *criteria):
        raise AlreadyExistsError(f"Project with name '{name}' already exists")


async def get_project(
    ctx: RequestContext, session: AsyncSession, project_id: uuid.UUID
) -> Project:
    project = await repository.get_live_or_404(session, Project, project_id, "Project")
    tenant_guard.validate_entity_access(ctx, project.tenant_id, "Project")
    return project


async def create(ctx: RequestContext, session: AsyncSession, body: ProjectCreate) -> ProjectRead:
    tenant = await repository.get_live_or_404(session, Tenant, body.tenant_id, "Tenant")
    tenant_guard.check_tenant_access(ctx, tenant.id)
    await _check_name_unique(session, body.name, tenant.id)

    project = Project(name=body.name, description=body.description, tenant_id=tenant.id)
    session.add(project)
    await session.commit()
    logger.info("Project %s created in tenant %s", project.id, tenant.id)
    return to_read(project)


async def get(ctx: RequestContext, session: AsyncSession, project_id: uuid.UUID) -> ProjectRead:
    return to_read(await get_project(ctx, session, project_id))


async def list_by_tenant(
    ctx: RequestContext, session: AsyncSession, tenant_id: uuid.UUID
) -> list[ProjectRead]:
    tenant_guard.check_tenant_access(ctx, tenant_id)
    projects = await repository.list_live(
        session, Project, Project.tenant_id == tenant_id, order_by=Project.name
    )
    return [to_read(p) for p in projects]


async def update(
    ctx: RequestContext, session: AsyncSession, project_id: uuid.UUID, body: ProjectUpdate
) -> ProjectRead:
    project = await get_project(ctx, session, project_id)
    data = body.model_dump(exclude_unset=True, exclude_none=True)
    if "name" in data:
        await _check_name_unique(session, data["name"], project.tenant_id, exclude_id=project.id)

    for field, value in data.items():
        setattr(project, field, value)
    repository.touch(session, project)
    await session.commit()
    return to_read(project)


async def delete(ctx: RequestContext, session: AsyncSession, project_id: uuid.UUID) -> None:
    project = await get_project(ctx, session, project_id)
    await cascade.delete_project_tree(session, project.id)
    await session.commit()
    logger.info("Project %s deleted", project_id)
