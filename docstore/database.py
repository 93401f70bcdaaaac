"""
Database connection setup and the unit-of-work used by every mutating operation.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Callable, Iterator, Optional, Tuple

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from docstore.config import DatabaseSettings
from docstore.errors import InfraError

logger = logging.getLogger(__name__)

Base = declarative_base()


def create_db_engine(settings: DatabaseSettings) -> Engine:
    # SQLite connections are shared across the request threadpool
    connect_args = {}
    if settings.connection_string.startswith("sqlite"):
        connect_args = {"check_same_thread": False}

    return create_engine(
        settings.connection_string,
        connect_args=connect_args,
        echo=settings.echo,
        pool_pre_ping=True,
    )


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


# ---------------------------------------------------------------------------
# Unit of work
# ---------------------------------------------------------------------------

# sqlite VM instructions between two deadline checks
SQLITE_PROGRESS_STEPS = 1000


class UnitOfWork:
    """A live transaction. ``active`` turns False once it is committed or rolled back."""

    def __init__(self, session: Session, release: Optional[Callable[[], None]] = None):
        self.session = session
        self.active = True
        self._release = release

    def commit(self) -> None:
        self._lift_bound()
        try:
            self.session.commit()
        finally:
            self._close()

    def rollback(self) -> None:
        self._lift_bound()
        try:
            self.session.rollback()
        finally:
            self._close()

    def _lift_bound(self) -> None:
        release, self._release = self._release, None
        if release is not None:
            release()

    def _close(self) -> None:
        self.active = False
        self.session.close()


def bound_statements(session: Session, deadline) -> Optional[Callable[[], None]]:
    """Make the database abandon statements still running when ``deadline`` fires.

    PostgreSQL gets a transaction-local ``statement_timeout``; SQLite a progress
    handler that interrupts the running statement. Returns the callable lifting
    the bound again, if one is needed.
    """
    remaining = deadline.remaining()
    if remaining is None:
        return None

    connection = session.connection()
    dialect = connection.dialect.name
    if dialect == "postgresql":
        timeout_ms = max(1, int(remaining * 1000))
        connection.exec_driver_sql(f"SET LOCAL statement_timeout = {timeout_ms}")
        return None
    if dialect == "sqlite":
        raw = connection.connection.driver_connection
        raw.set_progress_handler(lambda: 1 if deadline.expired() else 0, SQLITE_PROGRESS_STEPS)
        return lambda: raw.set_progress_handler(None, 0)

    logger.debug("no statement timeout for dialect '%s', relying on step checks", dialect)
    return None


def begin(session_factory: sessionmaker, deadline=None) -> UnitOfWork:
    """Open a new transaction; with a ``deadline`` its statements are bounded by it."""
    session = None
    try:
        session = session_factory()
        session.begin()
        release = bound_statements(session, deadline) if deadline is not None else None
    except SQLAlchemyError as e:
        logger.error("failed to start transaction: %s", e)
        if session is not None:
            session.close()
        raise InfraError(f"could not start atomic operation: {e}") from e
    return UnitOfWork(session, release)


def finish(
    should_close: bool,
    unit: Optional[UnitOfWork],
    err: Optional[BaseException],
) -> Optional[BaseException]:
    """Commit when ``err`` is None, otherwise roll back.

    Callers that joined an outer transaction pass ``should_close=False`` and the
    unit is left untouched. Returns the error the caller should raise, if any;
    a failing rollback is folded into it.
    """
    if not should_close or unit is None or not unit.active:
        return err

    if err is None:
        try:
            unit.commit()
        except SQLAlchemyError as e:
            logger.error("could not commit transaction: %s", e)
            return InfraError(f"could not commit transaction: {e}")
        return None

    logger.warning("could not complete the transaction: %s", err)
    try:
        unit.rollback()
    except SQLAlchemyError as e:
        return InfraError(f"{err}; could not rollback transaction: {e}")
    return err


def participate(
    outer: Optional[UnitOfWork], session_factory: sessionmaker, deadline=None
) -> Tuple[UnitOfWork, bool]:
    """Reuse ``outer`` when it is active, otherwise open a new unit.

    The second value reports whether the caller owns (and must finish) the unit.
    """
    if outer is not None and outer.active:
        return outer, False
    return begin(session_factory, deadline), True


@contextmanager
def unit_of_work(
    session_factory: sessionmaker, outer: Optional[UnitOfWork] = None, deadline=None
) -> Iterator[UnitOfWork]:
    """``with`` form of participate/finish."""
    unit, owned = participate(outer, session_factory, deadline)
    try:
        yield unit
    except BaseException as e:
        result = finish(owned, unit, e)
        if result is e:
            raise
        raise result from e
    result = finish(owned, unit, None)
    if result is not None:
        raise result
