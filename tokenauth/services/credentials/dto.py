# tokenauth/services/credentials/dto.py
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RegisterIn:
    """
    Input DTO for registration.

    :param username: Public handle (unique).
    :type username: str
    :param email: Login email (normalized by the model).
    :type email: str
    :param password: Raw password (hashed before persisting).
    :type password: str
    """

    username: str
    email: str
    password: str


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login.

    Exactly one lookup key is used: ``username`` when supplied, otherwise
    ``email``. Supplying neither is a caller contract violation and simply
    fails as an invalid login.

    :param password: Raw password (to be verified).
    :type password: str
    :param username: Optional username.
    :type username: str | None
    :param email: Optional email.
    :type email: str | None
    """

    password: str
    username: str | None = None
    email: str | None = None
