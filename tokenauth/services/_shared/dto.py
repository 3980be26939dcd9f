"""
Shared DTOs returned by every credential/session operation.

Operations never raise for expected failures; they return a
:class:`UserResponse` carrying either a user plus access token, or a
non-empty tuple of :class:`FieldError`.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class FieldError:
    """
    Field-level error rendered next to the offending input.

    :param field: Field name (``"email"``, ``"refresh token"``, ...).
    :type field: str
    :param message: Human-readable message.
    :type message: str
    """

    field: str
    message: str


@dataclass(frozen=True, slots=True)
class UserPublicOut:
    """
    Public-safe user payload (no hash, no token version).

    :param id: User identifier.
    :type id: int
    :param username: Public handle.
    :type username: str
    :param email: Normalized email.
    :type email: str
    """

    id: int
    username: str
    email: str


@dataclass(frozen=True, slots=True)
class UserResponse:
    """
    Result of register/login/refresh.

    The refresh token is never part of this payload; it travels through the
    token transport only.

    :param user: Authenticated user on success.
    :type user: UserPublicOut | None
    :param access_token: Fresh access token on success.
    :type access_token: str | None
    :param errors: Field errors on failure.
    :type errors: tuple[FieldError, ...]
    """

    user: UserPublicOut | None = None
    access_token: str | None = None
    errors: tuple[FieldError, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors

    @classmethod
    def success(cls, user: UserPublicOut, access_token: str) -> UserResponse:
        return cls(user=user, access_token=access_token)

    @classmethod
    def failure(cls, *errors: FieldError) -> UserResponse:
        if not errors:
            raise ValueError("A failed response needs at least one FieldError.")
        return cls(errors=tuple(errors))
