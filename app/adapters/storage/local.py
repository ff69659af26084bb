"""Local filesystem storage adapter."""

import logging
from pathlib import Path

import aiofiles
import aiofiles.os

from app.exceptions import StoredFileNotFoundError
from app.ports.storage import StoragePort

logger = logging.getLogger(__name__)


class LocalStorageAdapter(StoragePort):
    """Store uploaded files under a base directory."""

    def __init__(self, base_path: str, public_base_url: str = "/uploads") -> None:
        self._base = Path(base_path)
        self._base.mkdir(parents=True, exist_ok=True)
        self._public_base_url = public_base_url.rstrip("/")
        logger.debug("LocalStorage at: %s", self._base.resolve())

    def _path(self, key: str) -> Path:
        target = (self._base / key).resolve()
        # Keys must stay inside the storage root.
        if self._base.resolve() not in target.parents:
            raise StoredFileNotFoundError(key)
        return target

    async def save(self, key: str, content: bytes, content_type: str | None = None) -> str:
        filepath = self._path(key)
        filepath.parent.mkdir(parents=True, exist_ok=True)
        async with aiofiles.open(filepath, "wb") as f:
            await f.write(content)
        logger.info("Saved file: %s (%d bytes)", key, len(content))
        return key

    async def read(self, key: str) -> bytes:
        filepath = self._path(key)
        if not filepath.is_file():
            raise StoredFileNotFoundError(key)
        async with aiofiles.open(filepath, "rb") as f:
            content = await f.read()
        logger.debug("Read file: %s (%d bytes)", key, len(content))
        return content

    async def delete(self, key: str) -> None:
        filepath = self._path(key)
        if not filepath.is_file():
            logger.warning("File not found for deletion: %s", key)
            raise StoredFileNotFoundError(key)
        await aiofiles.os.remove(str(filepath))
        logger.info("Deleted file: %s", key)

    def url_for(self, key: str) -> str:
        return f"{self._public_base_url}/{key}"
