# tokenauth/services/_shared/base.py
from __future__ import annotations

import logging
from dataclasses import dataclass

from tokenauth.services._shared.dto import FieldError, UserPublicOut, UserResponse
from tokenauth.services._shared.errors import ServiceError
from tokenauth.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)


@dataclass(slots=True)
class ServiceContext:
    """
    Carry cross-cutting request-scoped data.

    :param actor_id: Authenticated user identifier, when known.
    :param request_id: Correlation id for logging/tracing.
    """

    actor_id: int | None = None
    request_id: str | None = None


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Provide helpers to run read-only and read-write units of work.
    * Turn :class:`ServiceError` into field-level error responses.
    * Keep services thin, orchestration-only, no web/ORM leakage.

    Notes
    -----
    - Services must never touch the global session; always use a Unit of Work.
    """

    log = logging.getLogger(__name__)

    def __init__(self, *, ctx: ServiceContext | None = None) -> None:
        self.ctx = ctx or ServiceContext()

    # -------------------------- UoW helpers ---------------------------------

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        """Create a read-write Unit of Work."""
        return SQLAlchemyUnitOfWork()

    def ro_uow(self) -> SQLAlchemyReadOnlyUnitOfWork:
        """Create a read-only Unit of Work."""
        return SQLAlchemyReadOnlyUnitOfWork()

    # -------------------------- Error handling ------------------------------

    def as_failure(self, exc: ServiceError) -> UserResponse:
        """
        Convert a recovered service error into a failed :class:`UserResponse`.

        :param exc: Error raised within the operation.
        :returns: Response carrying a single :class:`FieldError`.
        """
        self.log.info(
            "service.rejected error=%s field=%s request_id=%s",
            type(exc).__name__,
            exc.field,
            self.ctx.request_id,
        )
        return UserResponse.failure(FieldError(field=exc.field, message=exc.message))

    # -------------------------- Mapping -------------------------------------

    @staticmethod
    def to_user_public(user) -> UserPublicOut:
        """
        Map ORM ``User`` to :class:`UserPublicOut`.

        :param user: ORM user instance.
        :type user: :class:`tokenauth.models.user.User`
        """
        return UserPublicOut(id=user.id, username=user.username, email=user.email)
