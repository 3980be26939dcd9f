"""Generic repository base for SQLAlchemy 2.x.

This module centralizes persistence-only concerns shared by all repositories:
- Primary-key and equality lookups with a per-repository filter whitelist.
- Persist-and-flush that converts driver integrity errors into the typed
  :class:`~tokenauth.services._shared.errors.ConstraintViolation`.
- No business logic, no commit/rollback; Services own transactions.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, Generic, TypeVar, cast

from sqlalchemy import Select, Table, UniqueConstraint, and_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import InstrumentedAttribute, Session

from tokenauth.core.extensions import db
from tokenauth.services._shared.errors import (
    NOT_NULL_VIOLATION,
    UNIQUE_VIOLATION,
    ConstraintViolation,
)

E = TypeVar("E")  # SQLAlchemy mapped entity type

# SQLite reports "UNIQUE constraint failed: users.email" without a constraint name.
_SQLITE_PATTERNS = (
    (re.compile(r"UNIQUE constraint failed: (?P<cols>[\w., ]+)"), UNIQUE_VIOLATION),
    (re.compile(r"NOT NULL constraint failed: (?P<cols>[\w., ]+)"), NOT_NULL_VIOLATION),
)


def constraint_violation_from(exc: IntegrityError, table: Table) -> ConstraintViolation:
    """
    Normalise an :class:`IntegrityError` into a :class:`ConstraintViolation`.

    PostgreSQL drivers expose the SQLSTATE and constraint name directly
    (``pgcode``/``sqlstate`` and ``diag.constraint_name``). SQLite only reports
    the offending columns, which are resolved against the table's named
    unique constraints.

    :param exc: Error raised during flush/commit.
    :param table: Table the write targeted.
    :returns: Typed violation; ``code`` is ``"unknown"`` when unrecognised.
    """
    orig = exc.orig
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code:
        diag = getattr(orig, "diag", None)
        return ConstraintViolation(
            code=str(code),
            constraint_name=getattr(diag, "constraint_name", None),
            column=getattr(diag, "column_name", None),
        )

    message = str(orig) if orig is not None else str(exc)
    for pattern, sqlstate in _SQLITE_PATTERNS:
        match = pattern.search(message)
        if match is None:
            continue
        columns = {c.strip().split(".")[-1] for c in match.group("cols").split(",")}
        name = None
        if sqlstate == UNIQUE_VIOLATION:
            for constraint in table.constraints:
                if isinstance(constraint, UniqueConstraint) and {
                    c.name for c in constraint.columns
                } == columns:
                    name = constraint.name
                    break
        return ConstraintViolation(
            code=sqlstate,
            constraint_name=str(name) if name else None,
            column=sorted(columns)[0] if columns else None,
        )
    return ConstraintViolation(code="unknown")


class BaseRepository(Generic[E]):
    """Generic, persistence-only repository for a single aggregate.

    Subclasses MUST define:

    * ``model``: the SQLAlchemy mapped class.

    Subclasses MAY override:

    * ``_filterable_fields`` to enable filter whitelisting (recommended).

    This class NEVER opens/commits/rolls back transactions. Services
    orchestrate use cases and own transaction boundaries.
    """

    #: SQLAlchemy mapped model (must be set by subclasses)
    model: type[E]

    def __init__(self, session: Session | None = None) -> None:
        """Initialise the repository with an optional SQLAlchemy session.

        When no explicit session is provided the repository falls back to the
        Flask-scoped session exposed by ``tokenauth.core.extensions``.

        :param session: Session shared across the Unit of Work scope.
        :type session: :class:`sqlalchemy.orm.Session` | None
        """
        self._session: Session | None = session

    @property
    def session(self) -> Session:
        """Return the injected session or the Flask-scoped one."""
        if self._session is not None:
            return self._session
        return cast(Session, db.session)

    # ------------------------------ Extensibility ----------------------------

    def _filterable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]]:
        """Return public filter keys mapped to model attributes."""
        return {}

    def _pk_attr(self) -> InstrumentedAttribute[Any] | None:
        return cast(InstrumentedAttribute[Any] | None, getattr(self.model, "id", None))

    def _apply_equality_filters(
        self, stmt: Select[Any], filters: Mapping[str, Any] | None
    ) -> Select[Any]:
        """Apply whitelisted equality filters.

        :raises ValueError: When a key is not whitelisted.
        """
        if not filters:
            return stmt
        allowed = self._filterable_fields()
        clauses = []
        for key, value in filters.items():
            col = allowed.get(key)
            if col is None:
                raise ValueError(f"Unsupported filter field: {key}")
            clauses.append(col == value)
        return stmt.where(and_(*clauses))

    # ------------------------------ CRUD --------------------------------------

    def create(self, **fields: Any) -> E:
        """Instantiate (without persisting) a new entity.

        Model ``@validates`` hooks run here and may raise.
        """
        return self.model(**fields)

    def add(self, instance: E) -> E:
        """Persist ``instance`` and flush so constraints are checked immediately.

        :raises ConstraintViolation: When the database rejects the row.
        """
        self.session.add(instance)
        try:
            self.session.flush()
        except IntegrityError as exc:
            table = cast(Table, getattr(self.model, "__table__"))
            raise constraint_violation_from(exc, table) from exc
        return instance

    def get(self, entity_id: Any) -> E | None:
        """Retrieve an entity by primary key."""
        pk_attr = self._pk_attr()
        if pk_attr is None:
            raise RuntimeError("BaseRepository.get requires a detectable PK attribute.")
        stmt = select(self.model).where(pk_attr == entity_id)
        return cast(E | None, self.session.execute(stmt).scalars().first())

    def find_one(self, **filters: Any) -> E | None:
        """Find a single entity by simple equality filters.

        :param filters: Field=value pairs (equality only).
        :returns: Entity or ``None``.
        """
        stmt: Select[Any] = select(self.model)
        stmt = self._apply_equality_filters(stmt, filters)
        return cast(E | None, self.session.execute(stmt).scalars().first())
