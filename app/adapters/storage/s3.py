"""S3-compatible storage adapter (AWS S3, MinIO, etc.)."""

import asyncio
import logging
from functools import partial

import boto3
from botocore.exceptions import ClientError

from app.exceptions import StoredFileNotFoundError
from app.ports.storage import StoragePort

logger = logging.getLogger(__name__)

_MISSING_CODES = {"404", "NoSuchKey", "NotFound"}


class S3StorageAdapter(StoragePort):
    """Store uploaded files in an S3 bucket."""

    def __init__(
        self,
        endpoint_url: str | None,
        access_key: str,
        secret_key: str,
        bucket: str,
    ) -> None:
        self._client = boto3.client(
            "s3",
            endpoint_url=endpoint_url,
            aws_access_key_id=access_key or None,
            aws_secret_access_key=secret_key or None,
        )
        self._bucket = bucket
        self._endpoint_url = endpoint_url

    async def _call(self, method, **kwargs):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            None, partial(method, Bucket=self._bucket, **kwargs)
        )

    async def save(self, key: str, content: bytes, content_type: str | None = None) -> str:
        extra = {"ContentType": content_type} if content_type else {}
        await self._call(self._client.put_object, Key=key, Body=content, **extra)
        logger.info("Uploaded to S3: %s (%d bytes)", key, len(content))
        return key

    async def read(self, key: str) -> bytes:
        try:
            resp = await self._call(self._client.get_object, Key=key)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in _MISSING_CODES:
                raise StoredFileNotFoundError(key) from e
            raise
        content = resp["Body"].read()
        logger.debug("Downloaded from S3: %s (%d bytes)", key, len(content))
        return content

    async def delete(self, key: str) -> None:
        try:
            await self._call(self._client.head_object, Key=key)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in _MISSING_CODES:
                raise StoredFileNotFoundError(key) from e
            raise
        await self._call(self._client.delete_object, Key=key)
        logger.info("Deleted from S3: %s", key)

    def url_for(self, key: str) -> str:
        if self._endpoint_url:
            return f"{self._endpoint_url.rstrip('/')}/{self._bucket}/{key}"
        return f"https://{self._bucket}.s3.amazonaws.com/{key}"
