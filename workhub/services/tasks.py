"""Task workflow: creation, edits, state transitions, assignment and audit.

Invariants kept here:

* a task's state always belongs to the task's board; a board move resets the
  state to the new board's ``NEW`` state in the same write;
* every write goes through a version-guarded UPDATE, so a racing stale
  writer gets ``ConcurrentModificationError`` instead of overwriting;
* audit records are written after the primary commit and never undo it.
"""

import logging
import uuid
from typing import Any

from sqlalchemy import delete as sa_delete
from sqlalchemy import update as sa_update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from workhub.core.context import RequestContext
from workhub.core.exceptions import BadRequestError, ConcurrentModificationError, NotFoundError
from workhub.models.base import utcnow
from workhub.models.board import Board
from workhub.models.file import StoredFile
from workhub.models.project import Project
from workhub.models.task import (
    Task,
    TaskActionRead,
    TaskActionType,
    TaskAssignee,
    TaskCreate,
    TaskFile,
    TaskRead,
    TaskUpdate,
)
from workhub.models.task_state import NEW_STATE_CODE, TaskState
from workhub.services import (
    boards,
    employees,
    files,
    repository,
    task_actions,
    task_states,
    tenant_guard,
)

logger = logging.getLogger(__name__)


# ── Read model ───────────────────────────────────────────────

async def _assignee_ids(session: AsyncSession, task_id: uuid.UUID) -> list[uuid.UUID]:
    stmt = select(TaskAssignee.employee_id).where(TaskAssignee.task_id == task_id)
    return list((await session.execute(stmt)).scalars().all())


async def _attached_files(session: AsyncSession, task_id: uuid.UUID) -> list[StoredFile]:
    stmt = (
        select(StoredFile)
        .join(TaskFile, TaskFile.file_id == StoredFile.id)  # type: ignore[arg-type]
        .where(TaskFile.task_id == task_id, StoredFile.deleted.is_(False))  # type: ignore[attr-defined]
        .order_by(StoredFile.created_at)
    )
    return list((await session.execute(stmt)).scalars().all())


async def to_read(session: AsyncSession, task: Task) -> TaskRead:
    state = await session.get(TaskState, task.state_id)
    return TaskRead(
        id=task.id,
        board_id=task.board_id,
        state_id=task.state_id,
        state=state.code if state is not None else "",
        owner_id=task.owner_id,
        title=task.title,
        description=task.description,
        priority=task.priority,
        due_date=task.due_date,
        assignee_ids=await _assignee_ids(session, task.id),
        files=[files.to_read(f) for f in await _attached_files(session, task.id)],
        version=task.version,
        created_at=task.created_at,
        updated_at=task.updated_at,
    )


async def _to_read_list(session: AsyncSession, tasks) -> list[TaskRead]:
    return [await to_read(session, t) for t in tasks]


# ── Fetch-then-authorize ─────────────────────────────────────

async def get_task(ctx: RequestContext, session: AsyncSession, task_id: uuid.UUID) -> Task:
    task = await repository.get_live_or_404(session, Task, task_id, "Task")
    tenant_id = await tenant_guard.tenant_of_board(session, task.board_id)
    tenant_guard.validate_entity_access(ctx, tenant_id, "Task")
    return task


# ── Versioned write ──────────────────────────────────────────

async def _write_versioned(
    session: AsyncSession, task: Task, expected_version: int, changes: dict[str, Any]
) -> None:
    """Apply ``changes`` only if the row still has ``expected_version``. Caller commits."""
    stmt = (
        sa_update(Task)
        .where(
            Task.id == task.id,
            Task.version == expected_version,
            Task.deleted.is_(False),  # type: ignore[attr-defined]
        )
        .values(**changes, version=expected_version + 1, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    task_id = task.id
    result = await session.execute(stmt)
    if result.rowcount == 0:
        logger.warning("Version conflict on task %s (expected v%d)", task_id, expected_version)
        # Rollback expires every loaded instance, task included
        await session.rollback()
        raise ConcurrentModificationError()


async def _commit_and_reload(session: AsyncSession, task: Task) -> TaskRead:
    await session.commit()
    await session.refresh(task)
    return await to_read(session, task)


async def _attach_files(
    session: AsyncSession, task_id: uuid.UUID, stored: list[StoredFile]
) -> list[str]:
    """Link resolved files to the task, skipping ones already attached."""
    existing = {f.id for f in await _attached_files(session, task_id)}
    added: list[str] = []
    for f in stored:
        if f.id not in existing:
            session.add(TaskFile(task_id=task_id, file_id=f.id))
            added.append(f.key_name)
    return added


# ── Operations ───────────────────────────────────────────────

async def create(ctx: RequestContext, session: AsyncSession, body: TaskCreate) -> TaskRead:
    board = await boards.get_board(ctx, session, body.board_id)
    owner = await tenant_guard.acting_employee(ctx, session)
    new_state = await task_states.get_by_code(session, board.id, NEW_STATE_CODE)
    stored = await files.resolve_keys(ctx, session, body.file_keys)

    task = Task(
        board_id=board.id,
        state_id=new_state.id,
        owner_id=owner.id,
        title=body.title,
        description=body.description,
        priority=body.priority,
        due_date=body.due_date,
    )
    session.add(task)
    await session.flush()
    attached = await _attach_files(session, task.id, stored)
    await session.commit()

    read = await to_read(session, task)
    logger.info("Task %s created on board %s by %s", task.id, board.id, owner.id)
    await task_actions.log_action(
        session, task.id, owner.id, TaskActionType.CREATED,
        new_value=task.title,
        comment=f"Created with {len(attached)} files" if attached else None,
    )
    return read


async def update(
    ctx: RequestContext, session: AsyncSession, task_id: uuid.UUID, body: TaskUpdate
) -> TaskRead:
    task = await get_task(ctx, session, task_id)
    actor_id = (await tenant_guard.acting_employee(ctx, session)).id

    expected = task.version
    if body.version is not None and body.version != expected:
        logger.warning(
            "Stale update on task %s: client has v%d, row is v%d", task.id, body.version, expected
        )
        raise ConcurrentModificationError()

    data = body.model_dump(exclude_unset=True, exclude={"version", "file_keys", "board_id"})
    changes: dict[str, Any] = {}
    for field, value in data.items():
        if field in ("title", "description", "priority") and value is None:
            continue
        if getattr(task, field) != value:
            changes[field] = value

    old_title = task.title
    old_board_id = task.board_id
    board_changed = body.board_id is not None and body.board_id != task.board_id
    if board_changed:
        target = await boards.get_board(ctx, session, body.board_id)
        new_state = await task_states.get_by_code(session, target.id, NEW_STATE_CODE)
        changes["board_id"] = target.id
        changes["state_id"] = new_state.id

    attached: list[str] = []
    if body.file_keys:
        stored = await files.resolve_keys(ctx, session, body.file_keys)
        attached = await _attach_files(session, task.id, stored)

    if not changes and not attached:
        return await to_read(session, task)

    await _write_versioned(session, task, expected, changes)
    read = await _commit_and_reload(session, task)

    if board_changed:
        await task_actions.log_action(
            session, task_id, actor_id, TaskActionType.BOARD_CHANGED,
            old_value=str(old_board_id), new_value=str(read.board_id),
            comment="State reset to NEW",
        )
    if set(changes) - {"board_id", "state_id"}:
        await task_actions.log_action(
            session, task_id, actor_id, TaskActionType.UPDATED,
            old_value=old_title, new_value=read.title,
            comment="Changed: " + ", ".join(sorted(set(changes) - {"board_id", "state_id"})),
        )
    if attached:
        await task_actions.log_action(
            session, task_id, actor_id, TaskActionType.FILES_ATTACHED,
            new_value=", ".join(attached),
        )
    return read


async def change_state(
    ctx: RequestContext, session: AsyncSession, task_id: uuid.UUID, state_code: str
) -> TaskRead:
    task = await get_task(ctx, session, task_id)
    actor_id = (await tenant_guard.acting_employee(ctx, session)).id

    # Looked up inside the task's own board only
    new_state = await task_states.get_by_code(session, task.board_id, state_code)
    if new_state.id == task.state_id:
        return await to_read(session, task)

    old_state = await session.get(TaskState, task.state_id)
    old_name = old_state.name if old_state is not None else None
    logger.info("Changing task %s state from %s to %s", task.id, old_name, new_state.code)

    await _write_versioned(session, task, task.version, {"state_id": new_state.id})
    read = await _commit_and_reload(session, task)

    await task_actions.log_action(
        session, task_id, actor_id, TaskActionType.STATE_CHANGED,
        old_value=old_name, new_value=new_state.name,
    )
    return read


async def assign(
    ctx: RequestContext, session: AsyncSession, task_id: uuid.UUID, employee_id: uuid.UUID
) -> TaskRead:
    task = await get_task(ctx, session, task_id)
    actor_id = (await tenant_guard.acting_employee(ctx, session)).id
    employee = await employees.get_employee(ctx, session, employee_id)

    if await session.get(TaskAssignee, (task.id, employee.id)) is not None:
        logger.warning("Assign failed: employee %s already on task %s", employee.id, task.id)
        raise BadRequestError("Employee is already assigned to this task")

    session.add(TaskAssignee(task_id=task.id, employee_id=employee.id))
    await _write_versioned(session, task, task.version, {})
    read = await _commit_and_reload(session, task)

    logger.info("Assigned employee %s to task %s", employee.id, task.id)
    await task_actions.log_action(
        session, task_id, actor_id, TaskActionType.ASSIGNED,
        new_value=str(employee.id), comment="Assigned new employee",
    )
    return read


async def unassign(
    ctx: RequestContext, session: AsyncSession, task_id: uuid.UUID, employee_id: uuid.UUID
) -> TaskRead:
    task = await get_task(ctx, session, task_id)
    actor_id = (await tenant_guard.acting_employee(ctx, session)).id
    employee = await employees.get_employee(ctx, session, employee_id)

    if await session.get(TaskAssignee, (task.id, employee.id)) is None:
        logger.warning("Unassign failed: employee %s not on task %s", employee.id, task.id)
        raise NotFoundError("Employee not assigned to task")

    await session.execute(
        sa_delete(TaskAssignee).where(
            TaskAssignee.task_id == task.id,
            TaskAssignee.employee_id == employee.id,
        )
    )
    await _write_versioned(session, task, task.version, {})
    read = await _commit_and_reload(session, task)

    logger.info("Unassigned employee %s from task %s", employee.id, task.id)
    await task_actions.log_action(
        session, task_id, actor_id, TaskActionType.UNASSIGNED, old_value=str(employee.id),
    )
    return read


async def delete(ctx: RequestContext, session: AsyncSession, task_id: uuid.UUID) -> None:
    task = await get_task(ctx, session, task_id)
    actor_id = (await tenant_guard.acting_employee(ctx, session)).id
    title = task.title

    await _write_versioned(session, task, task.version, {"deleted": True})
    await session.commit()

    logger.info("Task %s deleted", task_id)
    await task_actions.log_action(
        session, task_id, actor_id, TaskActionType.DELETED, old_value=title,
    )


# ── Queries ──────────────────────────────────────────────────

async def get(ctx: RequestContext, session: AsyncSession, task_id: uuid.UUID) -> TaskRead:
    return await to_read(session, await get_task(ctx, session, task_id))


async def list_by_board(
    ctx: RequestContext, session: AsyncSession, board_id: uuid.UUID
) -> list[TaskRead]:
    board = await boards.get_board(ctx, session, board_id)
    tasks = await repository.list_live(
        session, Task, Task.board_id == board.id, order_by=Task.created_at
    )
    return await _to_read_list(session, tasks)


async def list_by_state(
    ctx: RequestContext, session: AsyncSession, state_id: uuid.UUID
) -> list[TaskRead]:
    state = await task_states.get_state(ctx, session, state_id)
    tasks = await repository.list_live(
        session, Task, Task.state_id == state.id, order_by=Task.created_at
    )
    return await _to_read_list(session, tasks)


async def my_tasks(ctx: RequestContext, session: AsyncSession) -> list[TaskRead]:
    """Live tasks assigned to the caller within the current tenant."""
    employee_id = ctx.require_employee()
    tenant_id = ctx.require_tenant()

    stmt = (
        select(Task)
        .join(TaskAssignee, TaskAssignee.task_id == Task.id)  # type: ignore[arg-type]
        .join(Board, Board.id == Task.board_id)  # type: ignore[arg-type]
        .join(Project, Project.id == Board.project_id)  # type: ignore[arg-type]
        .where(
            TaskAssignee.employee_id == employee_id,
            Project.tenant_id == tenant_id,
            Task.deleted.is_(False),  # type: ignore[attr-defined]
        )
        .order_by(Task.created_at)
    )
    tasks = (await session.execute(stmt)).scalars().all()
    return await _to_read_list(session, tasks)


async def history(
    ctx: RequestContext, session: AsyncSession, task_id: uuid.UUID
) -> list[TaskActionRead]:
    task = await get_task(ctx, session, task_id)
    return await task_actions.list_for_task(session, task.id)
