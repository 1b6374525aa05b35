"""Receipt blob storage.

Receipts live either in an S3 bucket or, when no bucket is configured, in a
local directory that ``spendwise.main`` serves under ``/uploads``. Both
backends expose the same async ``upload``/``delete`` pair; the boto3 and
filesystem calls are blocking, so they run in the default executor.
"""

import asyncio
import functools
import logging
import uuid
from pathlib import Path
from typing import Dict, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .config import settings
from .exceptions import StorageError

logger = logging.getLogger(__name__)

ALLOWED_RECEIPT_TYPES = ("image/jpeg", "image/jpg", "image/png", "application/pdf")

_EXTENSIONS: Dict[str, str] = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "application/pdf": "pdf",
}


def build_receipt_key(expense_id: uuid.UUID, content_type: str) -> str:
    """Return ``receipts/<expense_id>/<uuid>.<ext>`` for a new receipt blob.

    The extension comes from the validated content type, never from the
    client's filename, so a stored blob is always served as the type it was
    accepted as.
    """
    extension = _EXTENSIONS[content_type]
    return f"receipts/{expense_id}/{uuid.uuid4()}.{extension}"


async def _run_blocking(func, *args, **kwargs):
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, functools.partial(func, *args, **kwargs))


class ReceiptStorage:
    """Interface shared by the storage backends."""

    async def upload(self, content: bytes, key: str, content_type: str) -> str:
        """Store ``content`` under ``key`` and return its public URL."""
        raise NotImplementedError

    async def delete(self, key: str) -> None:
        raise NotImplementedError


class S3ReceiptStorage(ReceiptStorage):
    """Stores receipts in an S3 bucket."""

    def __init__(self, bucket_name: str, region: str, endpoint_url: Optional[str] = None):
        self.bucket_name = bucket_name
        self.region = region
        if endpoint_url:
            self.s3 = boto3.client("s3", region_name=region, endpoint_url=endpoint_url)
        else:
            self.s3 = boto3.client("s3", region_name=region)

    def public_url(self, key: str) -> str:
        return f"https://{self.bucket_name}.s3.{self.region}.amazonaws.com/{key}"

    async def upload(self, content: bytes, key: str, content_type: str) -> str:
        try:
            await _run_blocking(
                self.s3.put_object,
                Bucket=self.bucket_name,
                Key=key,
                Body=content,
                ContentType=content_type,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error uploading receipt to S3: {e}")
            raise StorageError("Failed to upload file")
        logger.info(f"Uploaded receipt to s3://{self.bucket_name}/{key}")
        return self.public_url(key)

    async def delete(self, key: str) -> None:
        try:
            await _run_blocking(self.s3.delete_object, Bucket=self.bucket_name, Key=key)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error deleting receipt from S3: {e}")
            raise StorageError("Failed to delete file")
        logger.info(f"Deleted receipt s3://{self.bucket_name}/{key}")


class LocalReceiptStorage(ReceiptStorage):
    """Stores receipts below a local directory, for development."""

    def __init__(self, root: str, url_prefix: str = "/uploads"):
        self.root = Path(root).resolve()
        self.url_prefix = url_prefix.rstrip("/")

    def _path(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if self.root not in path.parents:
            logger.error(f"Rejected storage key outside {self.root}: {key}")
            raise StorageError("Invalid storage key")
        return path

    @staticmethod
    def _write(path: Path, content: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)

    async def upload(self, content: bytes, key: str, content_type: str) -> str:
        path = self._path(key)
        try:
            await _run_blocking(self._write, path, content)
        except OSError as e:
            logger.error(f"Error writing receipt to {path}: {e}")
            raise StorageError("Failed to upload file")
        logger.info(f"Stored receipt at {path}")
        return f"{self.url_prefix}/{key}"

    async def delete(self, key: str) -> None:
        path = self._path(key)
        try:
            await _run_blocking(path.unlink)
        except OSError as e:
            logger.error(f"Error deleting receipt {path}: {e}")
            raise StorageError("Failed to delete file")
        logger.info(f"Deleted receipt {path}")


@functools.lru_cache(maxsize=1)
def get_receipt_storage() -> ReceiptStorage:
    """Return the configured storage backend (one per process)."""
    if settings.use_s3:
        return S3ReceiptStorage(
            settings.S3_BUCKET_NAME,
            settings.AWS_REGION,
            endpoint_url=settings.S3_ENDPOINT_URL or None,
        )
    return LocalReceiptStorage(settings.UPLOAD_DIR)


async def delete_blob_quietly(storage: ReceiptStorage, key: str) -> bool:
    """Delete a blob, logging instead of raising on failure.

    Metadata deletion must proceed even when the blob store is unavailable;
    a failed delete leaves an orphaned blob behind.
    """
    try:
        await storage.delete(key)
        return True
    except Exception as e:
        logger.error(f"Error deleting receipt blob {key}: {str(e)}")
        return False
