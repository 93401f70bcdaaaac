"""
Tag and sender dictionaries. Names are matched case-insensitively; the stored
casing is whatever the creating request supplied. Entries are never deleted.
"""
from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from docstore.database import UnitOfWork, unit_of_work
from docstore.errors import InfraError, NotFoundError
from docstore.models import SenderModel, TagModel
from docstore.repositories.base import Repository

logger = logging.getLogger(__name__)


class DictionaryRepository(Repository):
    model = None
    kind = "entry"

    def get_all(self) -> List:
        """All entries in alphabetical order."""
        try:
            with self._reader() as session:
                return session.query(self.model).order_by(self.model.name.asc()).all()
        except SQLAlchemyError as e:
            raise InfraError(f"could not list {self.kind}s: {e}") from e

    def search(self, term: str) -> List:
        """Entries whose name contains ``term``, ignoring case."""
        pattern = f"%{(term or '').lower()}%"
        try:
            with self._reader() as session:
                return (
                    session.query(self.model)
                    .filter(func.lower(self.model.name).like(pattern))
                    .order_by(self.model.name.asc())
                    .all()
                )
        except SQLAlchemyError as e:
            raise InfraError(f"could not search {self.kind}s: {e}") from e

    def get_by_name(self, name: str, unit: Optional[UnitOfWork] = None):
        try:
            with self._reader(unit) as session:
                row = (
                    session.query(self.model)
                    .filter(func.lower(self.model.name) == name.lower())
                    .order_by(self.model.id.asc())
                    .first()
                )
        except SQLAlchemyError as e:
            raise InfraError(f"could not look up {self.kind} '{name}': {e}") from e
        if row is None:
            raise NotFoundError(f"no {self.kind} named '{name}'")
        return row

    def create(self, name: str, unit: Optional[UnitOfWork] = None):
        """Insert a new entry; an existing entry with the same name is returned instead."""
        with unit_of_work(self._session_factory, unit) as u:
            try:
                return self.get_by_name(name, u)
            except NotFoundError:
                pass
            row = self.model(name=name)
            try:
                u.session.add(row)
                u.session.flush()
            except SQLAlchemyError as e:
                raise InfraError(f"cannot save {self.kind} item: {e}") from e
            logger.info("created %s '%s' (%d)", self.kind, name, row.id)
            return row


class TagRepository(DictionaryRepository):
    model = TagModel
    kind = "tag"


class SenderRepository(DictionaryRepository):
    model = SenderModel
    kind = "sender"
