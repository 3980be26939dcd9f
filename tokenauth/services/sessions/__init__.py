"""Session refresh: trade a refresh token for a new token pair."""

from .service import SessionService

__all__ = ["SessionService"]
