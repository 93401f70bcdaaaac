from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator, Optional

from sqlalchemy.orm import Session, sessionmaker

from docstore.database import UnitOfWork


def utcnow() -> datetime:
    """Naive UTC timestamp, the form stored in the database."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Repository:
    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    @contextmanager
    def _reader(self, unit: Optional[UnitOfWork] = None) -> Iterator[Session]:
        if unit is not None and unit.active:
            yield unit.session
            return
        with self._session_factory() as session:
            yield session
