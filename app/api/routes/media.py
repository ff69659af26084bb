"""Uploaded file routes backed by the storage port."""

import uuid
from pathlib import PurePosixPath

from fastapi import APIRouter, Depends, File, Response, UploadFile, status

from app.api.mapping import to_stored_file_response
from app.api.middleware.auth import TokenUser, require_authenticated
from app.api.schemas import StoredFileResponse
from app.dependencies import SettingsDep, StorageDep
from app.exceptions import FileTooLargeError, StoredFileNotFoundError

UPLOAD_CHUNK_SIZE = 64 * 1024

router = APIRouter(
    prefix="/api/media",
    tags=["Media"],
    dependencies=[Depends(require_authenticated)],
)


def _owned_key(principal: TokenUser, name: str) -> str:
    return f"{principal.identity}/{name}"


async def _read_limited(file: UploadFile, limit: int, limit_mb: int) -> bytes:
    """Read the upload in chunks, stopping as soon as it exceeds ``limit``."""
    if file.size is not None and file.size > limit:
        raise FileTooLargeError(file.size / (1024 * 1024), limit_mb)

    content = bytearray()
    while True:
        chunk = await file.read(UPLOAD_CHUNK_SIZE)
        if not chunk:
            break
        content.extend(chunk)
        if len(content) > limit:
            raise FileTooLargeError(len(content) / (1024 * 1024), limit_mb)
    return bytes(content)


@router.post("", response_model=StoredFileResponse, status_code=status.HTTP_201_CREATED)
async def upload(
    storage: StorageDep,
    settings: SettingsDep,
    file: UploadFile = File(...),
    principal: TokenUser = Depends(require_authenticated),
) -> StoredFileResponse:
    """Store a file under the caller's namespace."""
    content = await _read_limited(file, settings.max_upload_size_bytes, settings.MAX_UPLOAD_SIZE_MB)

    suffix = PurePosixPath(file.filename or "").suffix.lower()
    name = f"{uuid.uuid4().hex}{suffix}"
    key = await storage.save(_owned_key(principal, name), content, file.content_type)
    return to_stored_file_response(
        key=name,
        url=storage.url_for(key),
        size=len(content),
        content_type=file.content_type,
    )


@router.delete("/{name}", status_code=status.HTTP_204_NO_CONTENT)
async def delete(
    name: str,
    storage: StorageDep,
    principal: TokenUser = Depends(require_authenticated),
) -> Response:
    if "/" in name or name.startswith("."):
        raise StoredFileNotFoundError(name)
    await storage.delete(_owned_key(principal, name))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
