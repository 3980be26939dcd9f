"""
tokenauth.services._shared.ports
================================

*Ports* (hexagonal interfaces) the services depend on.

Modules
-------
- :mod:`token_transport`:
    Defines :class:`~.TokenTransport`, the out-of-band channel that carries the
    refresh token (an HTTP-only cookie in production), and
    :class:`~.InMemoryTokenTransport` for unit tests.

Concrete adapters live under ``tokenauth.infra``.
"""

from __future__ import annotations

from .token_transport import REFRESH_TOKEN_KEY, InMemoryTokenTransport, TokenTransport

__all__ = [
    "REFRESH_TOKEN_KEY",
    "TokenTransport",
    "InMemoryTokenTransport",
]
