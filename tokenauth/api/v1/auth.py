"""Authentication endpoints using the service layer."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, current_app, request
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt import PyJWTError

from tokenauth.api.deps import (
    credential_service,
    json_response,
    require_auth,
    revocation_service,
    session_service,
    timing,
    user_response,
)
from tokenauth.core.errors import Unauthorized
from tokenauth.core.extensions import limiter
from tokenauth.schemas import LoginSchema, LogoutSchema, RegisterSchema, UserSchema
from tokenauth.services.credentials import LoginIn, RegisterIn

bp = Blueprint("auth", __name__, url_prefix="/auth")

register_schema = RegisterSchema()
login_schema = LoginSchema()
logout_schema = LogoutSchema()
user_schema = UserSchema()


def _login_rate_limit() -> str:
    return str(current_app.config.get("AUTH_LOGIN_RATE_LIMIT", "5 per minute"))


@bp.post("/register")
@timing
def register():
    """Register a new user and return it with an access token."""
    payload = register_schema.load(request.get_json(silent=True) or {})
    result = credential_service().register(RegisterIn(**payload))
    return user_response(result, status=HTTPStatus.CREATED, failure_status=HTTPStatus.BAD_REQUEST)


@bp.post("/login")
@limiter.limit(_login_rate_limit)
@timing
def login():
    """Authenticate credentials; the refresh token is set as the ``jid`` cookie."""
    payload = login_schema.load(request.get_json(silent=True) or {})
    result = credential_service().login(LoginIn(**payload))
    return user_response(result, failure_status=HTTPStatus.UNAUTHORIZED)


@bp.post("/refresh_token")
@timing
def refresh_token():
    """Rotate the ``jid`` cookie and issue a new access token."""
    result = session_service().refresh()
    return user_response(result, failure_status=HTTPStatus.UNAUTHORIZED)


@bp.post("/logout")
@timing
def logout():
    """
    Clear the refresh cookie; never fails.

    With ``{"id": ...}`` every session of that user is revoked as well, but
    only when the request also carries a valid access token for that user.
    Otherwise the revocation is skipped and only the cookie is cleared.
    """
    payload = logout_schema.load(request.get_json(silent=True) or {})
    user_id = payload["id"]
    actor_id = _access_token_identity()
    if user_id is not None and user_id != actor_id:
        current_app.logger.warning(
            "logout.revoke_skipped user_id=%s actor_id=%s", user_id, actor_id
        )
        user_id = None
    ok = revocation_service(actor_id=actor_id).logout(user_id)
    return json_response({"ok": ok})


def _access_token_identity() -> int | None:
    """User id of a valid access token on the request; ``None`` if absent or rejected."""
    try:
        verify_jwt_in_request(optional=True)
    except (JWTExtendedException, PyJWTError) as exc:
        current_app.logger.info("logout.access_token_rejected reason=%s", exc)
        return None
    identity = get_jwt_identity()
    return None if identity is None else int(identity)


@bp.get("/me")
@require_auth
@timing
def me():
    """Return the user the access token was issued to."""
    identity = get_jwt_identity()
    user = credential_service().whoami(int(identity))
    if user is None:
        raise Unauthorized("User no longer exists")
    return json_response({"user": user_schema.dump(user)})
