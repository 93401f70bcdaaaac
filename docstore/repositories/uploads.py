"""
Upload staging store: metadata rows for files waiting on disk to be attached
to a document. The disk payload lives at ``<uploadPath>/<id>.<ext>``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from docstore.database import UnitOfWork, unit_of_work
from docstore.errors import InfraError, NotFoundError
from docstore.models import UploadModel
from docstore.repositories.base import Repository

logger = logging.getLogger(__name__)


@dataclass
class UploadItem:
    id: str
    file_name: str
    mime_type: str
    created: datetime


class UploadRepository(Repository):
    def write(self, item: UploadItem, unit: Optional[UnitOfWork] = None) -> None:
        with unit_of_work(self._session_factory, unit) as u:
            try:
                u.session.add(
                    UploadModel(
                        id=item.id,
                        file_name=item.file_name,
                        mime_type=item.mime_type,
                        created=item.created,
                    )
                )
                u.session.flush()
            except SQLAlchemyError as e:
                raise InfraError(f"cannot write upload item: {e}") from e

    def read(self, id: str, unit: Optional[UnitOfWork] = None) -> UploadItem:
        try:
            with self._reader(unit) as session:
                row = session.query(UploadModel).filter(UploadModel.id == id).first()
        except SQLAlchemyError as e:
            raise InfraError(f"cannot get upload-item by id '{id}': {e}") from e
        if row is None:
            raise NotFoundError(f"no upload-item with id '{id}'")
        return UploadItem(
            id=row.id,
            file_name=row.file_name,
            mime_type=row.mime_type,
            created=row.created,
        )

    def delete(self, id: str, unit: Optional[UnitOfWork] = None) -> None:
        with unit_of_work(self._session_factory, unit) as u:
            try:
                u.session.query(UploadModel).filter(UploadModel.id == id).delete(
                    synchronize_session=False
                )
            except SQLAlchemyError as e:
                raise InfraError(f"cannot delete upload item: {e}") from e
        logger.debug("deleted upload-item '%s'", id)
