"""
docstore write path.

Orchestrates: sanitize → consume upload → resolve tags/senders → insert or
update the document → write references → commit. Everything database-side
runs in one unit of work; any failure rolls it back.
"""
from __future__ import annotations

import base64
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional

from sqlalchemy.orm import sessionmaker

from docstore.config import UploadSettings
from docstore.database import unit_of_work
from docstore.errors import (
    AppError,
    BadRequestError,
    DeadlineExceeded,
    NotFoundError,
    ServerError,
)
from docstore.filestore import FileStore
from docstore.pipeline import dictionary
from docstore.pipeline.deadline import Deadline
from docstore.pipeline.sanitizer import sanitize_document
from docstore.pipeline.staging import consume_upload
from docstore.repositories import (
    DocumentEntity,
    DocumentRepository,
    SenderRepository,
    TagRepository,
    UploadRepository,
)
from docstore.schemas import Document

logger = logging.getLogger(__name__)


@dataclass
class Stores:
    """Everything the write path reads from or writes to."""
    session_factory: sessionmaker
    documents: DocumentRepository
    tags: TagRepository
    senders: SenderRepository
    uploads: UploadRepository
    filestore: FileStore
    upload: UploadSettings


@dataclass
class SaveOutcome:
    document: DocumentEntity
    created: bool


def preview_link(file_name: str) -> Optional[str]:
    if not file_name:
        return None
    return base64.b64encode(file_name.encode("utf-8")).decode("ascii")


@contextmanager
def _step(label: str, deadline: Deadline) -> Iterator[None]:
    """Prefix failures of one step with ``label``; not-found and deadline errors keep their kind.

    A failure after the deadline fired is reported as the deadline, since the
    database interrupts statements still running at that point.
    """
    try:
        yield
    except (DeadlineExceeded, NotFoundError):
        raise
    except AppError as e:
        if deadline.expired():
            logger.error("%s: interrupted by the request deadline: %s", label, e)
            raise DeadlineExceeded(label) from e
        logger.error("%s: %s", label, e)
        raise ServerError(f"{label}: {e}") from e


def save_document(
    dto: Document, stores: Stores, deadline: Optional[Deadline] = None
) -> SaveOutcome:
    """Persist ``dto``; ``created`` tells an insert from an update."""
    deadline = deadline or Deadline.none()
    deadline.check("begin")

    with unit_of_work(stores.session_factory, deadline=deadline) as unit:
        d = sanitize_document(dto)
        if not d.title.strip():
            raise BadRequestError("the document title must not be empty")

        with _step("upload-file error", deadline):
            file_name = consume_upload(
                d.upload_token,
                d.file_name,
                unit,
                uploads=stores.uploads,
                filestore=stores.filestore,
                config=stores.upload,
                deadline=deadline,
            )

        deadline.check("resolve tags")
        with _step("tag error", deadline):
            tag_ids, tag_list = dictionary.resolve(stores.tags, d.tags, unit)

        deadline.check("resolve senders")
        with _step("senders error", deadline):
            sender_ids, sender_list = dictionary.resolve(stores.senders, d.senders, unit)

        deadline.check("load document")
        existing = None
        if d.id:
            try:
                existing = stores.documents.get(d.id, unit)
                logger.info("will update existing document ID '%s'", d.id)
            except NotFoundError:
                logger.warning("cannot find document by ID '%s' - create a new entry", d.id)

        entity = DocumentEntity(
            id=existing.id if existing else "",
            title=d.title,
            file_name=file_name,
            preview_link=preview_link(file_name),
            amount=d.amount,
            tag_list=tag_list,
            sender_list=sender_list,
        )

        deadline.check("save document")
        with _step("error while saving document", deadline):
            entity = stores.documents.save(entity, unit)

        deadline.check("save references")
        with _step("error while saving references", deadline):
            stores.documents.save_references(entity.id, tag_ids, sender_ids, unit)

        deadline.check("commit")

    created = existing is None
    logger.info(
        "%s document '%s' (%s)", "created new" if created else "updated existing", entity.title, entity.id
    )
    return SaveOutcome(document=entity, created=created)


def delete_document(id: str, stores: Stores, deadline: Optional[Deadline] = None) -> str:
    """Delete the document row and its stored payload. Returns the removed file name.

    The payload is removed after the row, inside the same unit of work, so a
    failing object-store call rolls the row delete back.
    """
    deadline = deadline or Deadline.none()
    deadline.check("begin")

    with unit_of_work(stores.session_factory, deadline=deadline) as unit:
        try:
            file_name = stores.documents.exists(id, unit)
        except NotFoundError as e:
            logger.warning("the document '%s' is not available, %s", id, e)
            raise NotFoundError(f"document '{id}' not available") from e

        deadline.check("delete document")
        with _step(f"could not delete '{id}'", deadline):
            stores.documents.delete(id, unit)

        if file_name:
            try:
                deadline.call("delete file", stores.filestore.delete, file_name)
            except DeadlineExceeded:
                raise
            except NotFoundError:
                logger.warning("file '%s' of document '%s' was already gone", file_name, id)
            except AppError as e:
                logger.error("could not delete file in backend store '%s': %s", file_name, e)
                raise ServerError(f"could not delete '{id}': {e}") from e

    logger.info("deleted document '%s'", id)
    return file_name
