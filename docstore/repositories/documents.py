"""
Document repository: CRUD over the documents table and its tag/sender links.
"""
from __future__ import annotations

import logging
import random
import string
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy import delete, func, insert, or_, select, update
from sqlalchemy.exc import SQLAlchemyError

from docstore.database import UnitOfWork, unit_of_work
from docstore.errors import InfraError, NotFoundError
from docstore.models import DocumentModel, DocumentSenderModel, DocumentTagModel
from docstore.repositories.base import Repository, utcnow

logger = logging.getLogger(__name__)

ALT_ID_ALPHABET = string.ascii_lowercase + string.ascii_uppercase + string.digits
ALT_ID_LENGTH = 8
ALT_ID_ATTEMPTS = 5

# documents are only ever sorted by these columns
SORTABLE = {
    "title": DocumentModel.title,
    "created": DocumentModel.created,
    "modified": DocumentModel.modified,
}


@dataclass
class DocumentEntity:
    id: str = ""
    title: str = ""
    file_name: str = ""
    alt_id: str = ""
    preview_link: Optional[str] = None
    amount: float = 0.0
    tag_list: str = ""
    sender_list: str = ""
    created: Optional[datetime] = None
    modified: Optional[datetime] = None


@dataclass
class DocSearch:
    title: str = ""
    tag: str = ""
    sender: str = ""
    from_date: Optional[datetime] = None
    until_date: Optional[datetime] = None
    limit: int = 0
    skip: int = 0


@dataclass
class OrderBy:
    field: str
    descending: bool = False


@dataclass
class PagedResult:
    documents: List[DocumentEntity] = field(default_factory=list)
    count: int = 0


def new_document_id() -> str:
    return str(uuid.uuid4())


def new_alt_id(length: int = ALT_ID_LENGTH) -> str:
    # short human-friendly id, not security relevant
    return "".join(random.choices(ALT_ID_ALPHABET, k=length))


def _to_entity(row: DocumentModel) -> DocumentEntity:
    return DocumentEntity(
        id=row.id,
        title=row.title,
        file_name=row.file_name,
        alt_id=row.alt_id,
        preview_link=row.preview_link,
        amount=row.amount,
        tag_list=row.tag_list,
        sender_list=row.sender_list,
        created=row.created,
        modified=row.modified,
    )


def _unique(ids: Iterable[int]) -> List[int]:
    seen = set()
    out = []
    for i in ids:
        if i not in seen:
            seen.add(i)
            out.append(i)
    return out


class DocumentRepository(Repository):
    def get(self, id: str, unit: Optional[UnitOfWork] = None) -> DocumentEntity:
        try:
            with self._reader(unit) as session:
                row = session.query(DocumentModel).filter(DocumentModel.id == id).first()
                entity = _to_entity(row) if row is not None else None
        except SQLAlchemyError as e:
            raise InfraError(f"cannot get document by id '{id}': {e}") from e
        if entity is None:
            raise NotFoundError(f"cannot get document by id '{id}'")
        return entity

    def exists(self, id: str, unit: Optional[UnitOfWork] = None) -> str:
        """Return the stored file name of the document, ``NotFoundError`` if there is none."""
        try:
            with self._reader(unit) as session:
                file_name = session.execute(
                    select(DocumentModel.file_name).where(DocumentModel.id == id)
                ).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise InfraError(f"cannot check document '{id}': {e}") from e
        if file_name is None:
            raise NotFoundError(f"document '{id}' not available")
        return file_name

    def save(self, doc: DocumentEntity, unit: Optional[UnitOfWork] = None) -> DocumentEntity:
        """Insert or update a document.

        An empty id, or an id without a matching row, produces an INSERT with a
        freshly generated ``id``/``alt_id``/``created``. Otherwise the row is
        updated: ``id``, ``alt_id`` and ``created`` are kept and ``modified`` is set.
        Exactly one row has to be affected.
        """
        with unit_of_work(self._session_factory, unit) as u:
            existing = None
            if doc.id:
                try:
                    existing = u.session.execute(
                        select(DocumentModel.id, DocumentModel.alt_id, DocumentModel.created)
                        .where(DocumentModel.id == doc.id)
                    ).first()
                except SQLAlchemyError as e:
                    raise InfraError(f"cannot look up document '{doc.id}': {e}") from e
                if existing is None:
                    logger.warning("no document with id '%s' - a new entry will be created", doc.id)

            entity = replace(doc)
            values = {
                "title": entity.title,
                "file_name": entity.file_name,
                "preview_link": entity.preview_link,
                "amount": entity.amount,
                "tag_list": entity.tag_list,
                "sender_list": entity.sender_list,
            }
            if existing is None:
                entity.id = new_document_id()
                entity.alt_id = self._free_alt_id(u)
                entity.created = utcnow()
                entity.modified = None
                stmt = insert(DocumentModel.__table__).values(
                    id=entity.id, alt_id=entity.alt_id, created=entity.created, **values
                )
            else:
                entity.id = existing.id
                entity.alt_id = existing.alt_id
                entity.created = existing.created
                entity.modified = utcnow()
                stmt = (
                    update(DocumentModel.__table__)
                    .where(DocumentModel.__table__.c.id == entity.id)
                    .values(modified=entity.modified, **values)
                )

            try:
                result = u.session.execute(stmt)
            except SQLAlchemyError as e:
                raise InfraError(f"could not save document: {e}") from e
            if result.rowcount != 1:
                raise InfraError(f"invalid number of rows affected, got {result.rowcount}")
        return entity

    def _free_alt_id(self, unit: UnitOfWork) -> str:
        """A fresh alternative id not used by any stored document."""
        for _ in range(ALT_ID_ATTEMPTS):
            candidate = new_alt_id()
            try:
                taken = unit.session.execute(
                    select(DocumentModel.id).where(DocumentModel.alt_id == candidate)
                ).first()
            except SQLAlchemyError as e:
                raise InfraError(f"cannot check alternative id: {e}") from e
            if taken is None:
                return candidate
            logger.warning("alternative id '%s' already taken, generating another", candidate)
        raise InfraError(f"could not generate a free alternative id in {ALT_ID_ATTEMPTS} attempts")

    def delete(self, id: str, unit: Optional[UnitOfWork] = None) -> None:
        with unit_of_work(self._session_factory, unit) as u:
            try:
                u.session.execute(delete(DocumentTagModel.__table__).where(DocumentTagModel.__table__.c.document_id == id))
                u.session.execute(delete(DocumentSenderModel.__table__).where(DocumentSenderModel.__table__.c.document_id == id))
                u.session.execute(delete(DocumentModel.__table__).where(DocumentModel.__table__.c.id == id))
            except SQLAlchemyError as e:
                raise InfraError(f"cannot delete document item: {e}") from e

    def save_references(
        self,
        id: str,
        tag_ids: List[int],
        sender_ids: List[int],
        unit: Optional[UnitOfWork] = None,
    ) -> None:
        """Replace the tag and sender links of a document."""
        tags = DocumentTagModel.__table__
        senders = DocumentSenderModel.__table__
        with unit_of_work(self._session_factory, unit) as u:
            try:
                u.session.execute(delete(tags).where(tags.c.document_id == id))
                u.session.execute(delete(senders).where(senders.c.document_id == id))
                tag_rows = [{"document_id": id, "tag_id": t} for t in _unique(tag_ids)]
                sender_rows = [{"document_id": id, "sender_id": s} for s in _unique(sender_ids)]
                if tag_rows:
                    u.session.execute(insert(tags), tag_rows)
                if sender_rows:
                    u.session.execute(insert(senders), sender_rows)
            except SQLAlchemyError as e:
                raise InfraError(f"could not save references of document '{id}': {e}") from e

    def references(self, id: str, unit: Optional[UnitOfWork] = None) -> tuple[List[int], List[int]]:
        """Tag ids and sender ids currently linked to the document."""
        try:
            with self._reader(unit) as session:
                tag_ids = session.execute(
                    select(DocumentTagModel.tag_id).where(DocumentTagModel.document_id == id)
                ).scalars().all()
                sender_ids = session.execute(
                    select(DocumentSenderModel.sender_id).where(DocumentSenderModel.document_id == id)
                ).scalars().all()
        except SQLAlchemyError as e:
            raise InfraError(f"could not read references of document '{id}': {e}") from e
        return list(tag_ids), list(sender_ids)

    def search(self, s: DocSearch, order: Optional[List[OrderBy]] = None) -> PagedResult:
        """Paged, case-insensitive search. ``count`` ignores limit/skip."""
        filters = []
        if s.title:
            pattern = f"%{s.title.lower()}%"
            filters.append(
                or_(
                    func.lower(DocumentModel.title).like(pattern),
                    func.lower(DocumentModel.tag_list).like(pattern),
                    func.lower(DocumentModel.sender_list).like(pattern),
                )
            )
        if s.tag:
            filters.append(func.lower(DocumentModel.tag_list).like(f"%{s.tag.lower()}%"))
        if s.sender:
            filters.append(func.lower(DocumentModel.sender_list).like(f"%{s.sender.lower()}%"))
        if s.from_date is not None:
            filters.append(DocumentModel.created >= s.from_date)
        if s.until_date is not None:
            filters.append(DocumentModel.created <= s.until_date)

        ordering = []
        for o in order or []:
            if o.field not in SORTABLE:
                raise ValueError(f"cannot order documents by '{o.field}'")
            column = SORTABLE[o.field]
            ordering.append(column.desc() if o.descending else column.asc())

        try:
            with self._reader() as session:
                count = session.query(func.count(DocumentModel.id)).filter(*filters).scalar()
                query = session.query(DocumentModel).filter(*filters).order_by(*ordering)
                if s.limit > 0:
                    query = query.limit(s.limit)
                if s.skip > 0:
                    query = query.offset(s.skip)
                rows = query.all()
                documents = [_to_entity(r) for r in rows]
        except SQLAlchemyError as e:
            raise InfraError(f"could not search documents: {e}") from e
        logger.debug("search matched %d documents, returning %d", count, len(documents))
        return PagedResult(documents=documents, count=count or 0)
