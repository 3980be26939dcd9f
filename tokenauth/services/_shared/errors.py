"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and should never import or depend
on Flask, HTTP, or SQLAlchemy directly. They serve as stable contracts between
repositories, the token codec, and application services.

Every :class:`ServiceError` carries the field name and message that the
service boundary turns into a :class:`~tokenauth.services._shared.dto.FieldError`.
None of them escape a service operation; infrastructure failures
(database unavailable, hashing exhaustion) are not part of this taxonomy.
"""

from __future__ import annotations

from dataclasses import dataclass

# SQLSTATE codes normalised by the repository layer.
UNIQUE_VIOLATION = "23505"
NOT_NULL_VIOLATION = "23502"


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    :param message: Human-readable message, safe to show to clients.
    :param field: Field the error is attached to.
    """

    default_field = "user"
    default_message = "Unexpected error."

    def __init__(self, message: str | None = None, *, field: str | None = None) -> None:
        self.message = message or self.default_message
        self.field = field or self.default_field
        super().__init__(self.message)


class ValidationError(ServiceError):
    """A value was rejected by a uniqueness, not-null or field rule."""


class AuthError(ServiceError):
    """Bad credentials. Deliberately uninformative about the cause."""

    default_field = "credentials"
    default_message = "Invalid login."


class TokenError(ServiceError):
    """Base for refresh token failures."""

    default_field = "refresh token"


class TokenMissing(TokenError):
    default_message = "No refresh token was supplied."


class TokenInvalid(TokenError):
    """Bad signature, malformed structure or unexpected claims."""

    default_message = "Invalid token."


class TokenExpired(TokenError):
    """The embedded expiry is in the past."""

    default_message = "Token has expired."


class UserNotFound(TokenError):
    """The token subject no longer exists."""

    default_message = "could not find a user."


class TokenVersionMismatch(TokenError):
    """The refresh token was issued before the user's last revocation."""

    default_message = "your token is outdated."


# --------------------------------------------------------------------------- #
# Persistence contract
# --------------------------------------------------------------------------- #


@dataclass(slots=True)
class ConstraintViolation(Exception):
    """
    Typed result of a failed write, normalised across database drivers.

    :param code: SQLSTATE-like code (``"23505"`` unique, ``"23502"`` not-null).
    :type code: str
    :param constraint_name: Violated constraint name, when known.
    :type constraint_name: str | None
    :param column: Offending column, when known.
    :type column: str | None
    """

    code: str
    constraint_name: str | None = None
    column: str | None = None

    def __str__(self) -> str:  # pragma: no cover
        return f"constraint violation {self.code} ({self.constraint_name or self.column})"
