"""File upload / download."""

import uuid

from fastapi import APIRouter, Depends, UploadFile, status
from fastapi.responses import FileResponse

from workhub.api.deps import Ctx, RequireRank, Session, Storage
from workhub.models.employee import Position
from workhub.models.file import FileRead
from workhub.services import files

router = APIRouter(prefix="/files", tags=["files"])

_read = [Depends(RequireRank(Position.EMPLOYEE))]
_write = [Depends(RequireRank(Position.TEAM_LEAD))]


@router.post(
    "", response_model=FileRead, status_code=status.HTTP_201_CREATED, dependencies=_write
)
async def upload_file(file: UploadFile, ctx: Ctx, session: Session, storage: Storage) -> FileRead:
    content = await file.read()
    return await files.upload(ctx, session, storage, file.filename, file.content_type, content)


@router.get("/{key_name}", response_class=FileResponse, dependencies=_read)
async def download_file(
    key_name: str, ctx: Ctx, session: Session, storage: Storage
) -> FileResponse:
    stored, path = await files.download(ctx, session, storage, key_name)
    return FileResponse(
        path,
        media_type=stored.content_type or "application/octet-stream",
        filename=stored.original_name,
    )


@router.delete("/{file_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=_write)
async def delete_file(file_id: uuid.UUID, ctx: Ctx, session: Session) -> None:
    await files.delete(ctx, session, file_id)


@router.delete("/key/{key_name}", status_code=status.HTTP_204_NO_CONTENT, dependencies=_write)
async def delete_file_by_key(key_name: str, ctx: Ctx, session: Session) -> None:
    await files.delete_by_key(ctx, session, key_name)
