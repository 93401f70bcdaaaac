"""
Document API endpoints.

GET    /api/v1/documents/search  — paged search over title, tags, senders, dates
GET    /api/v1/documents/{id}    — get one document
DELETE /api/v1/documents/{id}    — delete a document and its stored file
POST   /api/v1/documents         — create or update a document
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from docstore.dependencies import get_deadline, get_stores
from docstore.errors import NotFoundError
from docstore.pipeline import Stores, delete_document, save_document
from docstore.pipeline.deadline import Deadline
from docstore.pipeline.dictionary import split
from docstore.pipeline.sanitizer import sanitize_document
from docstore.repositories import DocSearch, DocumentEntity, OrderBy
from docstore.schemas import ActionResult, Document, PagedDocuments, Result

logger = logging.getLogger(__name__)
router = APIRouter()

DEFAULT_LIMIT = 20


def format_time(value: Optional[datetime]) -> Optional[str]:
    """Stored timestamps are naive UTC; the wire format carries the offset."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat(timespec="seconds")


def parse_time(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    # an unescaped '+' in the query string arrives as a space
    value = value.strip().replace(" ", "+")
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        logger.debug("ignoring unparsable timestamp '%s'", value)
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def to_document(entity: DocumentEntity) -> Document:
    doc = Document.model_construct(
        id=entity.id,
        alt_id=entity.alt_id,
        title=entity.title,
        amount=entity.amount,
        created=format_time(entity.created) or "",
        modified=format_time(entity.modified),
        file_name=entity.file_name,
        preview_link=entity.preview_link,
        upload_token=None,
        tags=split(entity.tag_list),
        senders=split(entity.sender_list),
    )
    return sanitize_document(doc)


def parse_int(value: Optional[str], default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


# ── GET /api/v1/documents/search ─────────────────────────────────────────
@router.get("/documents/search", response_model=PagedDocuments, response_model_exclude_none=True)
def search_documents(
    title: str = "",
    tag: str = "",
    sender: str = "",
    from_date: Optional[str] = Query(None, alias="from"),
    until_date: Optional[str] = Query(None, alias="to"),
    limit: Optional[str] = None,
    skip: Optional[str] = None,
    stores: Stores = Depends(get_stores),
):
    search = DocSearch(
        title=title,
        tag=tag,
        sender=sender,
        from_date=parse_time(from_date),
        until_date=parse_time(until_date),
        limit=parse_int(limit, DEFAULT_LIMIT),
        skip=parse_int(skip, 0),
    )
    order = [OrderBy("created", descending=True), OrderBy("title")]
    result = stores.documents.search(search, order)
    logger.info("search returned %d of %d documents", len(result.documents), result.count)
    return PagedDocuments(
        documents=[to_document(d) for d in result.documents],
        total_entries=result.count,
    )


# ── GET /api/v1/documents/{id} ───────────────────────────────────────────
@router.get("/documents/{id}", response_model=Document, response_model_exclude_none=True)
def get_document(id: str, stores: Stores = Depends(get_stores)):
    try:
        entity = stores.documents.get(id)
    except NotFoundError:
        logger.warning("Document not found: %s", id)
        raise
    return to_document(entity)


# ── DELETE /api/v1/documents/{id} ────────────────────────────────────────
@router.delete("/documents/{id}", response_model=Result)
def delete_document_by_id(
    id: str,
    stores: Stores = Depends(get_stores),
    deadline: Deadline = Depends(get_deadline),
):
    delete_document(id, stores, deadline)
    return Result(message=f"Document with id '{id}' was deleted.", result=ActionResult.DELETED)


# ── POST /api/v1/documents ───────────────────────────────────────────────
@router.post("/documents", response_model=Result)
def post_document(
    doc: Document,
    response: Response,
    stores: Stores = Depends(get_stores),
    deadline: Deadline = Depends(get_deadline),
):
    outcome = save_document(doc, stores, deadline)
    saved = outcome.document
    if outcome.created:
        response.status_code = status.HTTP_201_CREATED
        return Result(
            message=f"Created new document '{saved.title}' ({saved.id})",
            result=ActionResult.CREATED,
        )
    response.status_code = status.HTTP_200_OK
    return Result(
        message=f"Updated existing document '{saved.title}' ({saved.id})",
        result=ActionResult.UPDATED,
    )
