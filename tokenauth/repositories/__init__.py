"""Repository package exposing persistence-layer access for all domain models."""

from __future__ import annotations

from tokenauth.repositories.base import BaseRepository, constraint_violation_from
from tokenauth.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "constraint_violation_from",
]
