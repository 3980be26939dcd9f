"""Unit tests for the read-only Unit of Work."""

from __future__ import annotations

import pytest

from tests.factories.user import UserFactory
from tokenauth.models.user import User
from tokenauth.uow.sqlalchemy_uow import SQLAlchemyReadOnlyUnitOfWork


def test_reads_are_allowed(session):
    u = UserFactory(username="reader")

    with SQLAlchemyReadOnlyUnitOfWork() as uow:
        assert uow.users.get_by_username("reader").id == u.id


def test_pending_writes_are_blocked(session):
    with pytest.raises(RuntimeError):
        with SQLAlchemyReadOnlyUnitOfWork() as uow:
            uow.session.add(User(username="w", email="w@example.com", password_hash="h"))
            uow.session.flush()

    assert session.query(User).count() == 0


def test_commit_is_disallowed(session):
    with SQLAlchemyReadOnlyUnitOfWork() as uow:
        with pytest.raises(RuntimeError):
            uow.commit()


def test_guard_is_removed_on_exit(session):
    with SQLAlchemyReadOnlyUnitOfWork():
        pass

    UserFactory(username="after")
    assert session.query(User).filter_by(username="after").count() == 1
