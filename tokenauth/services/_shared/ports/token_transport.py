from __future__ import annotations

from typing import Protocol

# Fixed key under which the client holds its refresh token.
REFRESH_TOKEN_KEY = "jid"


class TokenTransport(Protocol):
    """
    Client-held refresh token channel.

    The refresh token must never travel in a response body; it is set on and
    read from this side channel only.
    """

    def read(self) -> str | None:
        """Return the inbound refresh token, or ``None`` when absent."""
        ...

    def set(self, token: str) -> None:
        """Hand ``token`` to the client (HTTP-only)."""
        ...

    def clear(self) -> None:
        """Remove the client-held token."""
        ...


class InMemoryTokenTransport(TokenTransport):
    """Process-local transport for unit tests and callers outside a request (CLI)."""

    def __init__(self, token: str | None = None) -> None:
        self.value: str | None = token
        self.cleared = False
        self.history: list[str] = []

    def read(self) -> str | None:
        return self.value

    def set(self, token: str) -> None:
        self.value = token
        self.cleared = False
        self.history.append(token)

    def clear(self) -> None:
        self.value = None
        self.cleared = True
