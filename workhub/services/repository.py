"""Generic persistence helpers shared by every entity service.

All table models carry ``id`` and the ``deleted`` soft-delete flag, so a
handful of free functions cover the lookups each service needs. Nothing
here performs authorization; callers run the tenant guard on the result.
"""

import uuid
from collections.abc import Sequence
from typing import Any, TypeVar

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel, select

from workhub.core.exceptions import AlreadyExistsError, NotFoundError

ModelT = TypeVar("ModelT", bound=SQLModel)


async def fetch_live(
    session: AsyncSession, model: type[ModelT], entity_id: uuid.UUID
) -> ModelT | None:
    stmt = select(model).where(
        model.id == entity_id,  # type: ignore[attr-defined]
        model.deleted.is_(False),  # type: ignore[attr-defined]
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def get_live_or_404(
    session: AsyncSession,
    model: type[ModelT],
    entity_id: uuid.UUID,
    label: str | None = None,
) -> ModelT:
    entity = await fetch_live(session, model, entity_id)
    if entity is None:
        raise NotFoundError(f"{label or model.__name__} not found with id: {entity_id}")
    return entity


async def list_live(
    session: AsyncSession,
    model: type[ModelT],
    *criteria: Any,
    order_by: Any = None,
) -> Sequence[ModelT]:
    stmt = select(model).where(model.deleted.is_(False), *criteria)  # type: ignore[attr-defined]
    if order_by is not None:
        stmt = stmt.order_by(order_by)
    result = await session.execute(stmt)
    return result.scalars().all()


async def exists(session: AsyncSession, model: type[SQLModel], *criteria: Any) -> bool:
    """True when at least one live row matches ``criteria``."""
    stmt = (
        select(func.count())
        .select_from(model)
        .where(model.deleted.is_(False), *criteria)  # type: ignore[attr-defined]
    )
    result = await session.execute(stmt)
    return result.scalar_one() > 0


def soft_delete(session: AsyncSession, entity: SQLModel) -> None:
    """Flag the row as deleted. The caller commits."""
    entity.mark_deleted()  # type: ignore[attr-defined]
    entity.touch()  # type: ignore[attr-defined]
    session.add(entity)


def touch(session: AsyncSession, entity: SQLModel) -> None:
    entity.touch()  # type: ignore[attr-defined]
    session.add(entity)


async def commit_unique(session: AsyncSession, conflict_message: str) -> None:
    """Commit, mapping a uniqueness violation to ``AlreadyExistsError``."""
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise AlreadyExistsError(conflict_message) from exc


async def flush_unique(session: AsyncSession, conflict_message: str) -> None:
    try:
        await session.flush()
    except IntegrityError as exc:
        await session.rollback()
        raise AlreadyExistsError(conflict_message) from exc
