"""Append-only task audit trail."""

import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from workhub.models.account import Account
from workhub.models.employee import Employee
from workhub.models.task import TaskAction, TaskActionRead, TaskActionType

logger = logging.getLogger(__name__)

COMMENT_MAX = 150


async def log_action(
    session: AsyncSession,
    task_id: uuid.UUID,
    modifier_id: uuid.UUID,
    action_type: TaskActionType,
    old_value: str | None = None,
    new_value: str | None = None,
    comment: str | None = None,
) -> None:
    """Record one action in its own commit, after the mutation it describes.

    The insert runs inside a savepoint, so a failure only discards the audit
    row and leaves the caller's loaded objects intact. Failures are logged
    and swallowed; the mutation is already committed.
    """
    try:
        async with session.begin_nested():
            session.add(
                TaskAction(
                    task_id=task_id,
                    modifier_id=modifier_id,
                    action_type=action_type,
                    old_value=old_value,
                    new_value=new_value,
                    comment=comment[:COMMENT_MAX] if comment else None,
                )
            )
        await session.commit()
    except Exception as exc:
        logger.warning(
            "Failed to log task action [task_id=%s, type=%s]: %s", task_id, action_type, exc
        )


async def list_for_task(session: AsyncSession, task_id: uuid.UUID) -> list[TaskActionRead]:
    stmt = (
        select(TaskAction, Account.first_name, Account.last_name)
        .join(Employee, Employee.id == TaskAction.modifier_id)  # type: ignore[arg-type]
        .join(Account, Account.id == Employee.account_id)  # type: ignore[arg-type]
        .where(TaskAction.task_id == task_id)
        .order_by(TaskAction.created_at)  # type: ignore[arg-type]
    )
    result = await session.execute(stmt)
    return [
        TaskActionRead(
            id=action.id,
            task_id=action.task_id,
            modifier_id=action.modifier_id,
            modifier_name=f"{first} {last}".strip(),
            action_type=action.action_type,
            old_value=action.old_value,
            new_value=action.new_value,
            comment=action.comment,
            created_at=action.created_at,
        )
        for action, first, last in result.all()
    ]
