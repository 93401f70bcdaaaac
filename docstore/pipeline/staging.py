"""
Moves a staged upload from the local staging directory into the object store.
"""
from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from docstore.config import UploadSettings
from docstore.database import UnitOfWork
from docstore.errors import AppError, InfraError, ServerError
from docstore.filestore import FileItem, FileStore
from docstore.pipeline.deadline import Deadline
from docstore.repositories import UploadRepository

logger = logging.getLogger(__name__)

NO_UPLOAD = ("", "-")


def folder_for(now: datetime) -> str:
    """Object-store folder for a write at ``now`` (UTC calendar date)."""
    return now.astimezone(timezone.utc).strftime("%Y_%m_%d")


def staging_path(upload_path: str, token: str, ext: str) -> Path:
    """``ext`` carries its leading dot, or is empty."""
    return Path(upload_path) / f"{token}{ext}"


def read_payload(path: Path, max_size: int) -> bytes:
    try:
        with open(path, "rb") as f:
            payload = f.read(max_size + 1)
    except OSError as e:
        logger.error("could not read upload file '%s': %s", path, e)
        raise InfraError(f"error reading upload-file: {e}") from e
    if len(payload) > max_size:
        raise InfraError(f"upload-file '{path.name}' exceeds the maximum size of {max_size}")
    return payload


def consume_upload(
    token: Optional[str],
    file_name: str,
    unit: UnitOfWork,
    uploads: UploadRepository,
    filestore: FileStore,
    config: UploadSettings,
    deadline: Optional[Deadline] = None,
) -> str:
    """Store the staged file for ``token`` and return the document's new file name.

    Without a token the given ``file_name`` is kept. Cleanup of the staging file
    and row is best-effort: failures there are logged and do not fail the save.
    """
    if token is None or token in NO_UPLOAD:
        return file_name
    deadline = deadline or Deadline.none()

    try:
        deadline.check("read upload item")
        item = uploads.read(token, unit)
    except AppError as e:
        logger.error("could not read upload-file for token '%s': %s", token, e)
        raise ServerError(f"upload token error: {e}") from e

    logger.info("use uploaded file identified by token '%s'", token)

    folder = folder_for(datetime.now(timezone.utc))
    ext = os.path.splitext(file_name)[1]
    path = staging_path(config.upload_path, token, ext)

    deadline.check("read upload file")
    payload = read_payload(path, config.max_upload_size)
    logger.debug("got upload file '%s' with payload size '%d'", path, len(payload))

    deadline.call(
        "save file",
        filestore.save,
        FileItem(
            file_name=file_name,
            folder_name=folder,
            mime_type=item.mime_type,
            payload=payload,
        ),
    )

    # the disk file goes first: a leftover file is preferable to a row without a file
    try:
        path.unlink()
    except OSError as e:
        logger.warning("could not delete upload-file '%s': %s", path, e)
    try:
        uploads.delete(token, unit)
    except AppError as e:
        logger.warning("could not delete the upload-item by id '%s': %s", token, e)

    return f"/{folder}/{file_name}"
