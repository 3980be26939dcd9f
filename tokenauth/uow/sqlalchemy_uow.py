"""Flask-SQLAlchemy units of work (read-write and read-only)."""

from __future__ import annotations

from contextlib import suppress

from sqlalchemy import event
from sqlalchemy.orm import Session

from tokenauth.core.extensions import db
from tokenauth.repositories import UserRepository
from tokenauth.uow.base import UnitOfWork


class SQLAlchemyRepositoryContainer:
    """Repositories sharing one session."""

    def __init__(self, *, session: Session) -> None:
        self.session = session
        self.users = UserRepository(session=self.session)


class SQLAlchemyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-write transaction on the request-scoped session.

    Commits when the block exits cleanly, rolls back when it raises. A failed
    commit is rolled back and re-raised.
    """

    def __init__(self) -> None:
        super().__init__(session=db.session)

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.rollback()
            return
        try:
            self.commit()
        except Exception:
            self.rollback()
            raise

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class SQLAlchemyReadOnlyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Lookup-only transaction (login, refresh).

    A ``before_flush`` guard turns any ORM write into ``RuntimeError`` and the
    transaction is always rolled back on exit. ``commit()`` is refused.
    """

    def __init__(self) -> None:
        # The thread-local Session, not the scoped proxy: the guard must not leak to other threads.
        super().__init__(session=db.session())
        self._guarded = False

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        event.listen(self.session, "before_flush", self._refuse_flush)
        self._guarded = True
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            with suppress(Exception):
                self.session.rollback()
        finally:
            if self._guarded:
                event.remove(self.session, "before_flush", self._refuse_flush)
                self._guarded = False

    def commit(self) -> None:
        """:raises RuntimeError: always."""
        raise RuntimeError("Read-only UnitOfWork does not allow commit().")

    def rollback(self) -> None:
        self.session.rollback()

    @staticmethod
    def _refuse_flush(session, flush_context, instances) -> None:
        if session.new or session.dirty or session.deleted:
            raise RuntimeError("Read-only UnitOfWork: ORM flush blocked.")
