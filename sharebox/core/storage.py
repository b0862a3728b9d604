# sharebox/core/storage.py
"""
Durable storage for file bytes.

Keys are opaque strings generated by the file service. Both backends expose the
same four calls: ``put``, ``get``, ``delete`` and ``exists``. ``get`` and
``delete`` raise ``StorageNotFound`` when the key has no object behind it; any
other failure propagates as the backend's own exception.
"""
import logging
from pathlib import Path

import boto3
from botocore.exceptions import ClientError

from sharebox.core.config import Settings

logger = logging.getLogger(__name__)


class StorageNotFound(Exception):
    """Raised when a key has no stored object."""


class Storage:
    def put(self, key: str, data: bytes, content_type: str | None = None) -> None:
        raise NotImplementedError

    def get(self, key: str) -> bytes:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError

    def exists(self, key: str) -> bool:
        raise NotImplementedError


class LocalStorage(Storage):
    """Keeps each object as a file below ``root``; ``/`` in keys become subdirectories."""

    def __init__(self, root):
        self.root = Path(root).resolve()
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if self.root not in path.parents:
            raise ValueError(f"Storage key escapes storage root: {key!r}")
        return path

    def put(self, key, data, content_type=None):
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)

    def get(self, key):
        try:
            return self._path(key).read_bytes()
        except FileNotFoundError:
            raise StorageNotFound(key)

    def delete(self, key):
        try:
            self._path(key).unlink()
        except FileNotFoundError:
            raise StorageNotFound(key)

    def exists(self, key):
        return self._path(key).is_file()


class S3Storage(Storage):
    def __init__(self, client, bucket_name: str):
        self.s3 = client
        self.bucket_name = bucket_name

    @classmethod
    def from_settings(cls, settings: Settings) -> "S3Storage":
        client = boto3.client(
            "s3",
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
            region_name=settings.aws_region,
        )
        return cls(client, settings.aws_s3_bucket_name)

    def put(self, key, data, content_type=None):
        self.s3.put_object(
            Bucket=self.bucket_name,
            Key=key,
            Body=data,
            ContentType=content_type or "application/octet-stream",
        )

    def get(self, key):
        try:
            obj = self.s3.get_object(Bucket=self.bucket_name, Key=key)
        except ClientError as e:
            if e.response["Error"]["Code"] in ("NoSuchKey", "404"):
                raise StorageNotFound(key)
            raise
        return obj["Body"].read()

    def delete(self, key):
        # S3 deletes succeed for absent keys, so check first to report them
        if not self.exists(key):
            raise StorageNotFound(key)
        self.s3.delete_object(Bucket=self.bucket_name, Key=key)

    def exists(self, key):
        try:
            self.s3.head_object(Bucket=self.bucket_name, Key=key)
        except ClientError as e:
            if e.response["Error"]["Code"] in ("NoSuchKey", "404", "NotFound"):
                return False
            raise
        return True


def build_storage(settings: Settings) -> Storage:
    if settings.storage_backend == "s3":
        if not settings.aws_s3_bucket_name:
            raise ValueError("aws_s3_bucket_name is required for the s3 storage backend")
        logger.info("Using S3 storage bucket %s", settings.aws_s3_bucket_name)
        return S3Storage.from_settings(settings)
    if settings.storage_backend == "local":
        logger.info("Using local storage under %s", settings.storage_dir)
        return LocalStorage(settings.storage_dir)
    raise ValueError(f"Unknown storage backend: {settings.storage_backend!r}")
