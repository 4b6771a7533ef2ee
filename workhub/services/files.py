"""Uploaded file metadata plus the blob round trip through storage."""

import logging
import secrets
import string
import uuid
from collections.abc import Sequence
from pathlib import Path

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from workhub.core.config import get_settings
from workhub.core.context import RequestContext
from workhub.core.exceptions import BadRequestError, FileStorageError, NotFoundError
from workhub.core.storage import LocalFileStorage
from workhub.models.file import FileRead, FileType, StoredFile
from workhub.services import repository, tenant_guard

logger = logging.getLogger(__name__)

settings = get_settings()

KEY_ALPHABET = string.ascii_letters + string.digits
KEY_LENGTH = 32
MAX_KEY_RETRIES = 10

_IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".webp", ".gif")
_VIDEO_EXTENSIONS = (".mp4", ".mov", ".avi")


def to_read(stored: StoredFile) -> FileRead:
    return FileRead.model_validate(stored)


def classify(content_type: str | None, filename: str) -> FileType:
    ct = (content_type or "").lower()
    name = filename.lower()
    if ct.startswith("image") or name.endswith(_IMAGE_EXTENSIONS):
        return FileType.PHOTO
    if ct.startswith("video") or name.endswith(_VIDEO_EXTENSIONS):
        return FileType.VIDEO
    return FileType.DOCUMENT


async def _generate_unique_key(session: AsyncSession) -> str:
    for _ in range(MAX_KEY_RETRIES):
        key = "".join(secrets.choice(KEY_ALPHABET) for _ in range(KEY_LENGTH))
        stmt = select(StoredFile.id).where(StoredFile.key_name.startswith(key))  # type: ignore[attr-defined]
        if (await session.execute(stmt)).first() is None:
            return key
    raise FileStorageError("Max key generation attempts exceeded")


async def upload(
    ctx: RequestContext,
    session: AsyncSession,
    storage: LocalFileStorage,
    filename: str | None,
    content_type: str | None,
    content: bytes,
) -> FileRead:
    if not content:
        raise BadRequestError("File is empty")
    if len(content) > settings.max_upload_bytes:
        raise BadRequestError("File size exceeds limit")

    original_name = filename or "unnamed"
    key = await _generate_unique_key(session) + Path(original_name).suffix.lower()

    try:
        storage.store(key, content)
    except OSError as exc:
        logger.error("Disk write failed for %s: %s", key, exc)
        raise FileStorageError("Disk write failed") from exc

    stored = StoredFile(
        tenant_id=ctx.current_tenant(),
        file_type=classify(content_type, original_name),
        original_name=original_name,
        key_name=key,
        content_type=content_type,
        size=len(content),
    )
    session.add(stored)
    try:
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        storage.delete(key)
        logger.error("Database save failed for %s: %s", key, exc)
        raise FileStorageError("Database save failed") from exc

    logger.info("Stored file %s (%d bytes)", key, stored.size)
    return to_read(stored)


async def get_by_key(ctx: RequestContext, session: AsyncSession, key: str) -> StoredFile:
    stmt = select(StoredFile).where(
        StoredFile.key_name == key,
        StoredFile.deleted.is_(False),  # type: ignore[attr-defined]
    )
    stored = (await session.execute(stmt)).scalar_one_or_none()
    if stored is None:
        raise NotFoundError(f"File not found: {key}")
    tenant_guard.validate_entity_access(ctx, stored.tenant_id, "File")
    return stored


async def resolve_keys(
    ctx: RequestContext, session: AsyncSession, keys: Sequence[str]
) -> list[StoredFile]:
    """Every key must name a live file the caller may see."""
    unique_keys = list(dict.fromkeys(keys))
    if not unique_keys:
        return []

    stmt = select(StoredFile).where(
        StoredFile.key_name.in_(unique_keys),  # type: ignore[attr-defined]
        StoredFile.deleted.is_(False),  # type: ignore[attr-defined]
    )
    found = list((await session.execute(stmt)).scalars().all())

    missing = set(unique_keys) - {f.key_name for f in found}
    if missing:
        raise NotFoundError(f"Files not found: {', '.join(sorted(missing))}")
    for stored in found:
        tenant_guard.validate_entity_access(ctx, stored.tenant_id, "File")
    return found


async def download(
    ctx: RequestContext, session: AsyncSession, storage: LocalFileStorage, key: str
) -> tuple[StoredFile, Path]:
    stored = await get_by_key(ctx, session, key)
    if not storage.exists(stored.key_name):
        logger.error("Blob missing on disk for file %s", stored.key_name)
        raise NotFoundError(f"File not found or unreadable: {key}")
    return stored, storage.path_for(stored.key_name)


async def delete(ctx: RequestContext, session: AsyncSession, file_id: uuid.UUID) -> None:
    stored = await repository.get_live_or_404(session, StoredFile, file_id, "File")
    tenant_guard.validate_entity_access(ctx, stored.tenant_id, "File")
    repository.soft_delete(session, stored)
    await session.commit()
    logger.info("File marked as deleted with id: %s", file_id)


async def delete_by_key(ctx: RequestContext, session: AsyncSession, key: str) -> None:
    stored = await get_by_key(ctx, session, key)
    repository.soft_delete(session, stored)
    await session.commit()
    logger.info("File marked as deleted with key: %s", key)
