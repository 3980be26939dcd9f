# tokenauth/infra/http/cookie_transport.py
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from flask import Response, after_this_request, request

from tokenauth.services._shared.ports import REFRESH_TOKEN_KEY, TokenTransport


@dataclass(slots=True)
class FlaskCookieTransport(TokenTransport):
    """
    Refresh token transport backed by an HTTP-only cookie.

    .. note::
       Requires an active Flask request context; cookie writes are applied to
       the outgoing response through :func:`flask.after_this_request`.
    """

    cookie_name: str = REFRESH_TOKEN_KEY
    secure: bool = False
    samesite: str | None = "Lax"
    path: str = "/"
    max_age: int | None = None

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> FlaskCookieTransport:
        return cls(
            cookie_name=config.get("REFRESH_COOKIE_NAME", REFRESH_TOKEN_KEY),
            secure=bool(config.get("REFRESH_COOKIE_SECURE", False)),
            samesite=config.get("REFRESH_COOKIE_SAMESITE", "Lax"),
            path=config.get("REFRESH_COOKIE_PATH", "/"),
            max_age=config.get("REFRESH_TOKEN_TTL_SECONDS"),
        )

    def read(self) -> str | None:
        return request.cookies.get(self.cookie_name) or None

    def set(self, token: str) -> None:
        @after_this_request
        def _set_cookie(response: Response) -> Response:
            response.set_cookie(
                self.cookie_name,
                value=token,
                max_age=self.max_age,
                path=self.path,
                secure=self.secure,
                httponly=True,
                samesite=self.samesite,
            )
            return response

    def clear(self) -> None:
        @after_this_request
        def _clear_cookie(response: Response) -> Response:
            response.delete_cookie(
                self.cookie_name,
                path=self.path,
                secure=self.secure,
                httponly=True,
                samesite=self.samesite,
            )
            return response
