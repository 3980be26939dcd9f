"""
CredentialService
=================

Registration and password login.

- ``register`` hashes the password and persists the user in one unit of
  work; database constraint violations come back as field errors.
- ``login`` verifies the password, issues an access token in the response
  and a refresh token through the token transport.

Both return a :class:`~tokenauth.services._shared.dto.UserResponse` and never
raise for expected failures.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import MappingProxyType

from tokenauth.infra.jwt.token_codec import TokenCodec
from tokenauth.infra.security.password_hasher import Argon2PasswordHasher
from tokenauth.models.base import FieldValueError
from tokenauth.repositories.user import UserRepository
from tokenauth.services._shared.base import BaseService, ServiceContext
from tokenauth.services._shared.dto import UserPublicOut, UserResponse
from tokenauth.services._shared.errors import (
    NOT_NULL_VIOLATION,
    UNIQUE_VIOLATION,
    AuthError,
    ConstraintViolation,
    ValidationError,
)
from tokenauth.services._shared.ports import TokenTransport
from tokenauth.services.credentials.dto import LoginIn, RegisterIn

log = logging.getLogger(__name__)

# Unique constraint name -> user-facing field.
CONSTRAINT_FIELDS: Mapping[str, str] = MappingProxyType(
    {
        "uq_users_email": "email",
        "uq_users_username": "username",
    }
)


class CredentialService(BaseService):
    """
    Orchestrates registration and login.

    :param hasher: Password hasher.
    :param codec: Token codec issuing access/refresh tokens.
    :param transport: Out-of-band channel for the refresh token.
    """

    def __init__(
        self,
        *,
        hasher: Argon2PasswordHasher,
        codec: TokenCodec,
        transport: TokenTransport,
        ctx: ServiceContext | None = None,
    ) -> None:
        super().__init__(ctx=ctx)
        self.hasher = hasher
        self.codec = codec
        self.transport = transport

    # ------------------------------------------------------------------ #
    # Register
    # ------------------------------------------------------------------ #

    def register(self, dto: RegisterIn) -> UserResponse:
        """
        Create a user and return it with an access token.

        No refresh token is issued here; the client logs in for one.

        :param dto: Registration input.
        :returns: Success with user + access token, or field errors.
        :raises HashError: When hashing fails (infrastructure).
        """
        password_hash = self.hasher.hash(dto.password)

        try:
            with self.rw_uow() as uow:
                repo: UserRepository = uow.users
                user = repo.create(
                    username=dto.username,
                    email=dto.email,
                    password_hash=password_hash,
                    token_version=0,
                )
                repo.add(user)
                public = self.to_user_public(user)
        except FieldValueError as exc:
            return self.as_failure(ValidationError(exc.message, field=exc.field))
        except ConstraintViolation as exc:
            log.info(
                "register.constraint_violation code=%s constraint=%s",
                exc.code,
                exc.constraint_name,
            )
            return self.as_failure(self._violation_to_error(exc))

        log.info("register.created user_id=%s", public.id)
        return UserResponse.success(public, self.codec.create_access_token(public.id))

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> UserResponse:
        """
        Authenticate credentials and issue a fresh token pair.

        Unknown user and wrong password yield the same error, and both paths
        run one full password verification.

        :param dto: Login input.
        :returns: Success with user + access token, or the generic login error.
        """
        with self.ro_uow() as uow:
            repo: UserRepository = uow.users
            if dto.username:
                user = repo.get_by_username(dto.username)
            else:
                user = repo.get_by_email(dto.email or "")
            snapshot: tuple[UserPublicOut, str, int] | None = None
            if user is not None:
                snapshot = (self.to_user_public(user), user.password_hash, user.token_version)

        if snapshot is None:
            self.hasher.verify_dummy(dto.password)
            log.warning("login.failed reason=unknown_user by=%s", self._lookup_key(dto))
            return self.as_failure(AuthError())

        public, digest, token_version = snapshot
        if not self.hasher.verify(digest, dto.password):
            log.warning("login.failed reason=bad_password user_id=%s", public.id)
            return self.as_failure(AuthError())

        refresh_token = self.codec.create_refresh_token(public.id, token_version)
        access_token = self.codec.create_access_token(public.id)
        self.transport.set(refresh_token)

        log.info("login.succeeded user_id=%s", public.id)
        return UserResponse.success(public, access_token)

    def whoami(self, user_id: int) -> UserPublicOut | None:
        """Return the public view of ``user_id``, or ``None`` if it no longer exists."""
        with self.ro_uow() as uow:
            user = uow.users.get(user_id)
            return None if user is None else self.to_user_public(user)

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _violation_to_error(exc: ConstraintViolation) -> ValidationError:
        """Map a typed constraint violation onto a field error without leaking storage details."""
        if exc.code == UNIQUE_VIOLATION:
            field = CONSTRAINT_FIELDS.get(exc.constraint_name or "")
            if field is not None:
                return ValidationError(f"{field} already taken.", field=field)
            return ValidationError("Value already taken.", field="user")
        if exc.code == NOT_NULL_VIOLATION:
            return ValidationError("Failed to insert on not null field", field="user")
        return ValidationError("Could not create user.", field="user")

    @staticmethod
    def _lookup_key(dto: LoginIn) -> str:
        return "username" if dto.username else "email"
