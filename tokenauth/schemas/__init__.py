"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import (
    FieldErrorSchema,
    LoginSchema,
    LogoutSchema,
    RegisterSchema,
    UserResponseSchema,
    UserSchema,
)

__all__ = [
    "FieldErrorSchema",
    "LoginSchema",
    "LogoutSchema",
    "RegisterSchema",
    "UserResponseSchema",
    "UserSchema",
]
