"""Logout and whole-account session revocation."""

from .service import RevocationService

__all__ = ["RevocationService"]
