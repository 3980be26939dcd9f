"""Shared API helpers: responses, auth guards and service construction."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from http import HTTPStatus
from typing import Any, TypeVar

from flask import Response, current_app, jsonify, request
from flask_jwt_extended import verify_jwt_in_request

from tokenauth.core.extensions import get_password_hasher, get_token_codec
from tokenauth.core.logger import ensure_request_id
from tokenauth.infra.http.cookie_transport import FlaskCookieTransport
from tokenauth.schemas import UserResponseSchema
from tokenauth.services._shared.base import ServiceContext
from tokenauth.services._shared.dto import UserResponse
from tokenauth.services.credentials import CredentialService
from tokenauth.services.revocation import RevocationService
from tokenauth.services.sessions import SessionService

F = TypeVar("F", bound=Callable[..., Any])

_success_schema = UserResponseSchema(only=("user", "access_token"))
_failure_schema = UserResponseSchema(only=("errors",))


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""
    response = jsonify(payload)
    response.status_code = status
    return response


def user_response(
    result: UserResponse,
    *,
    status: int = HTTPStatus.OK,
    failure_status: int = HTTPStatus.BAD_REQUEST,
) -> Response:
    """Render a service :class:`UserResponse` as ``{user, accessToken}`` or ``{errors}``."""
    if result.ok:
        return json_response(_success_schema.dump(result), status=status)
    return json_response(_failure_schema.dump(result), status=failure_status)


def require_auth(func: F) -> F:
    """Ensure the request carries a valid JWT access token."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        verify_jwt_in_request(optional=False)
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request.endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]


# ----------------------------- Service wiring -----------------------------


def _context(actor_id: int | None = None) -> ServiceContext:
    return ServiceContext(actor_id=actor_id, request_id=ensure_request_id())


def _transport() -> FlaskCookieTransport:
    return FlaskCookieTransport.from_config(current_app.config)


def credential_service() -> CredentialService:
    return CredentialService(
        hasher=get_password_hasher(),
        codec=get_token_codec(),
        transport=_transport(),
        ctx=_context(),
    )


def session_service() -> SessionService:
    return SessionService(codec=get_token_codec(), transport=_transport(), ctx=_context())


def revocation_service(actor_id: int | None = None) -> RevocationService:
    return RevocationService(transport=_transport(), ctx=_context(actor_id))
