"""Storage port: abstract interface for uploaded file storage."""

from abc import ABC, abstractmethod


class StoragePort(ABC):
    """Abstraction over local disk and S3-compatible object storage."""

    @abstractmethod
    async def save(self, key: str, content: bytes, content_type: str | None = None) -> str:
        """Store ``content`` under ``key``. Returns the stored key."""
        ...

    @abstractmethod
    async def read(self, key: str) -> bytes:
        """Return the stored bytes. Raises StoredFileNotFoundError if absent."""
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove the stored object. Raises StoredFileNotFoundError if absent."""
        ...

    @abstractmethod
    def url_for(self, key: str) -> str:
        """Public URL for a stored key."""
        ...
