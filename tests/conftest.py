"""Pytest fixtures configuring an isolated database per test.

The application is built once per session against an in-memory SQLite
database. Every test gets a freshly created schema, which is dropped again on
teardown, so committed data never leaks between cases.
"""

from __future__ import annotations

import os

import pytest

from tokenauth.core.config import TestingConfig
from tokenauth.core.extensions import db as _db
from tokenauth.core.extensions import get_password_hasher, get_token_codec
from tokenauth.factory import create_app
from tokenauth.services._shared.ports import InMemoryTokenTransport


@pytest.fixture(scope="session")
def app():
    """Create a Flask application configured for testing.

    Returns
    -------
    flask.Flask
        Application with :class:`TestingConfig` applied.
    """
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    app = create_app(TestingConfig, instance_relative_config=False)
    app.logger.setLevel("WARNING")
    return app


@pytest.fixture(scope="session")
def db(app):
    """Return the database extension bound to the testing application."""
    return _db


@pytest.fixture(scope="function")
def session(app, db):
    """Provide the application session on a freshly created schema.

    An application context is pushed for the duration of the test; requests
    made through the test client reuse it, and with it the same session.

    Yields
    ------
    sqlalchemy.orm.scoping.scoped_session
        The Flask-SQLAlchemy session used by the units of work.
    """
    with app.app_context():
        db.create_all()
        try:
            yield db.session
        finally:
            db.session.remove()
            db.drop_all()


@pytest.fixture()
def client(app):
    """Return a Flask test client."""
    return app.test_client()


@pytest.fixture()
def codec(app):
    """Token codec configured from :class:`TestingConfig`."""
    with app.app_context():
        return get_token_codec()


@pytest.fixture()
def hasher(app):
    """Low-cost argon2id hasher configured from :class:`TestingConfig`."""
    with app.app_context():
        return get_password_hasher()


@pytest.fixture()
def transport():
    """In-memory refresh token channel."""
    return InMemoryTokenTransport()


@pytest.fixture()
def freeze_time():
    """Factory returning :func:`freezegun.freeze_time`.

    Examples
    --------
    >>> def test_with_frozen_time(freeze_time):
    ...     with freeze_time("2024-01-01"):
    ...         ...
    """
    from freezegun import freeze_time as _freeze_time

    def _factory(target=None):
        return _freeze_time(target or "2024-01-01")

    return _factory


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


# -- Hook up Factory Boy to the pytest session -------------------------------
@pytest.fixture(autouse=True)
def _factories_session(session):
    """Wire Factory Boy's session helper to the per-test session fixture."""
    from tests.factories import SQLAlchemySession

    SQLAlchemySession.set(session)
    yield
