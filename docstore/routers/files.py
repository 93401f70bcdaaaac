"""
Stored file access.

GET /api/v1/file?path=<base64> — raw payload with its mime type
"""
from __future__ import annotations

import base64
import binascii
import logging

from fastapi import APIRouter, Depends, Response

from docstore.dependencies import get_filestore
from docstore.errors import BadRequestError
from docstore.filestore import FileStore

logger = logging.getLogger(__name__)
router = APIRouter()


def decode_path(path: str) -> str:
    try:
        return base64.b64decode(path, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise BadRequestError(f"the supplied path param cannot be decoded. {e}") from e


# ── GET /api/v1/file ─────────────────────────────────────────────────────
@router.get("/file")
@router.get("/file/", include_in_schema=False)
def get_file(path: str = "", filestore: FileStore = Depends(get_filestore)):
    decoded = decode_path(path)
    logger.info("fetching file '%s'", decoded)
    item = filestore.get(decoded)
    return Response(content=item.payload, media_type=item.mime_type)
