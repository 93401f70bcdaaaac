"""
Object store adapter. Binary payloads live in S3 under ``<folder>/<filename>``
with the mime type kept as object metadata.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from docstore.config import FileStoreSettings
from docstore.errors import InfraError, NotFoundError

logger = logging.getLogger(__name__)

_MISSING_CODES = {"404", "NoSuchKey", "NotFound"}


@dataclass
class FileItem:
    file_name: str
    folder_name: str
    mime_type: str
    payload: bytes

    @property
    def key(self) -> str:
        return object_key(f"{self.folder_name}/{self.file_name}")


def object_key(path: str) -> str:
    """Document file names start with ``/``; object keys do not."""
    return path.strip().lstrip("/")


class FileStore(ABC):
    """Storage for document payloads."""

    @abstractmethod
    def save(self, item: FileItem) -> None:
        """Write the payload; an existing object at the same key is overwritten."""

    @abstractmethod
    def get(self, path: str) -> FileItem:
        """Return payload and mime type; ``NotFoundError`` if absent."""

    @abstractmethod
    def delete(self, path: str) -> None:
        """Remove the object; ``NotFoundError`` if absent."""


class S3FileStore(FileStore):
    def __init__(
        self,
        bucket: str,
        region: str,
        access_key: Optional[str] = None,
        secret_key: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        client=None,
    ):
        self.bucket = bucket
        if client is None:
            config = Config(
                signature_version="s3v4",
                retries={"max_attempts": 3},
                connect_timeout=5,
                read_timeout=30,
            )
            client = boto3.client(
                "s3",
                aws_access_key_id=access_key,
                aws_secret_access_key=secret_key,
                region_name=region,
                endpoint_url=endpoint_url,
                config=config,
            )
        self.client = client

    @classmethod
    def from_settings(cls, settings: FileStoreSettings) -> "S3FileStore":
        return cls(
            bucket=settings.bucket,
            region=settings.region,
            access_key=settings.key or None,
            secret_key=settings.secret or None,
            endpoint_url=settings.endpoint_url or None,
        )

    def save(self, item: FileItem) -> None:
        key = item.key
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=item.payload,
                ContentType=item.mime_type or "application/octet-stream",
            )
        except (ClientError, BotoCoreError) as e:
            logger.error("could not save object '%s': %s", key, e)
            raise InfraError(f"could not save file '{key}': {e}") from e
        logger.info("stored object '%s' (%d bytes)", key, len(item.payload))

    def get(self, path: str) -> FileItem:
        key = object_key(path)
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=key)
            payload = response["Body"].read()
        except ClientError as e:
            if _error_code(e) in _MISSING_CODES:
                raise NotFoundError(f"file not found '{path}'") from e
            raise InfraError(f"could not get file '{key}': {e}") from e
        except BotoCoreError as e:
            raise InfraError(f"could not get file '{key}': {e}") from e

        folder, _, name = key.rpartition("/")
        return FileItem(
            file_name=name,
            folder_name=folder,
            mime_type=response.get("ContentType", "application/octet-stream"),
            payload=payload,
        )

    def delete(self, path: str) -> None:
        key = object_key(path)
        try:
            # delete_object succeeds for missing keys, so check first
            self.client.head_object(Bucket=self.bucket, Key=key)
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            if _error_code(e) in _MISSING_CODES:
                raise NotFoundError(f"file not found '{path}'") from e
            raise InfraError(f"could not delete file '{key}': {e}") from e
        except BotoCoreError as e:
            raise InfraError(f"could not delete file '{key}': {e}") from e
        logger.info("deleted object '%s'", key)


def _error_code(e: ClientError) -> str:
    return str(e.response.get("Error", {}).get("Code", ""))
