"""
Upload staging endpoint.

POST /api/v1/uploads/file — stage a file on disk and return its token
"""
from __future__ import annotations

import logging
import os
import uuid
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile, status

from docstore.config import Settings
from docstore.dependencies import get_settings, get_stores
from docstore.errors import AppError, BadRequestError, InfraError
from docstore.pipeline import Stores
from docstore.repositories import UploadItem, utcnow
from docstore.schemas import UploadResult

logger = logging.getLogger(__name__)
router = APIRouter()

CHUNK_SIZE = 64 * 1024


def extension_of(file_name: str) -> str:
    return os.path.splitext(file_name)[1].lstrip(".")


def copy_bounded(src, dst: Path, max_size: int) -> int:
    """Copy ``src`` to ``dst``; more than ``max_size`` bytes is a bad request."""
    written = 0
    with open(dst, "wb") as out:
        while True:
            chunk = src.read(CHUNK_SIZE)
            if not chunk:
                break
            written += len(chunk)
            if written > max_size:
                raise BadRequestError(
                    f"the upload exceeds the maximum size of {max_size} - filesize is larger"
                )
            out.write(chunk)
    return written


def _remove(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning("Clean-Up file-upload. Could not delete temp file '%s': %s", path, e)


# ── POST /api/v1/uploads/file ────────────────────────────────────────────
@router.post("/uploads/file", response_model=UploadResult, status_code=status.HTTP_201_CREATED)
def upload_file(
    file: Optional[UploadFile] = File(None),
    settings: Settings = Depends(get_settings),
    stores: Stores = Depends(get_stores),
):
    config = settings.upload
    if file is None or not file.filename:
        raise BadRequestError("no file provided")

    if file.size is not None and file.size > config.max_upload_size:
        raise BadRequestError(
            f"the upload exceeds the maximum size of {config.max_upload_size} - filesize is: {file.size}"
        )

    ext = extension_of(file.filename)
    allowed = [t.lower() for t in config.allowed_file_types]
    if ext.lower() not in allowed:
        raise BadRequestError(
            f"the uploaded file-type '{ext}' is not allowed, only use: '{','.join(config.allowed_file_types)}'"
        )

    token = str(uuid.uuid4())
    upload_dir = Path(config.upload_path)
    target = upload_dir / f"{token}.{ext}"
    try:
        upload_dir.mkdir(parents=True, exist_ok=True)
        copy_bounded(file.file, target, config.max_upload_size)
    except BadRequestError:
        _remove(target)
        raise
    except OSError as e:
        _remove(target)
        raise InfraError(f"could not copy file: {e}") from e

    item = UploadItem(
        id=token,
        file_name=file.filename,
        mime_type=file.content_type or "application/octet-stream",
        created=utcnow(),
    )
    try:
        stores.uploads.write(item)
    except AppError as e:
        _remove(target)
        raise InfraError(f"could not save upload item in store: {e}") from e

    logger.info("staged upload '%s' as '%s'", file.filename, target.name)
    return UploadResult(token=token, message=f"File '{file.filename}' was uploaded successfully!")
