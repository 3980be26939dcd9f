"""RFC 7807 problem responses for everything the service layer does not recover.

Expected credential/session failures never reach these handlers; services
return them as field errors. What lands here is request validation, access
token rejection, authorization, routing errors and infrastructure faults.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, jsonify, request
from marshmallow import ValidationError as MarshmallowValidationError
from sqlalchemy.exc import OperationalError
from werkzeug.exceptions import HTTPException

from tokenauth.core.extensions import jwt
from tokenauth.core.logger import ensure_request_id
from tokenauth.infra.security.password_hasher import HashError

log = logging.getLogger(__name__)

PROBLEM_MIMETYPE = "application/problem+json"

_STATUS_CODES: dict[int, str] = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    415: "unsupported_media_type",
    422: "validation_error",
    429: "too_many_requests",
    500: "internal_server_error",
    503: "service_unavailable",
}


def problem(
    status: int,
    detail: str,
    *,
    code: str | None = None,
    details: dict[str, Any] | None = None,
    exc_info: bool = False,
) -> tuple[Response, int]:
    """
    Log and render a Problem Details response.

    5xx are logged as errors (with traceback when ``exc_info``), 4xx as
    warnings. The correlation id is always attached.

    :param status: HTTP status code.
    :param detail: Client-safe description.
    :param code: Stable machine-readable code; derived from ``status`` if omitted.
    :param details: Extra structured payload (e.g. field messages).
    :param exc_info: Attach the active traceback to the log record.
    :returns: ``(response, status)`` tuple for Flask.
    """
    status = int(status)
    code = code or _STATUS_CODES.get(status, "error")
    body: dict[str, Any] = {
        "type": "about:blank",
        "title": HTTPStatus(status).phrase,
        "status": status,
        "detail": detail,
        "instance": request.path,
        "code": code,
        "request_id": ensure_request_id(),
    }
    if details:
        body["details"] = details

    if status >= 500:
        log.error("problem code=%s status=%s detail=%s", code, status, detail, exc_info=exc_info)
    else:
        log.warning("problem code=%s status=%s detail=%s", code, status, detail)

    response = jsonify(body)
    response.mimetype = PROBLEM_MIMETYPE
    return response, status


class APIError(Exception):
    """
    Error raised by views to short-circuit with a problem response.

    Parameters
    ----------
    message : str
        Client-safe description.
    status_code : int, optional
        HTTP status. Defaults to ``400``.
    code : str | None, optional
        Machine-readable code; derived from the status when omitted.
    """

    def __init__(self, message: str, status_code: int = 400, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = int(status_code)
        self.code = code


class Unauthorized(APIError):
    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message, status_code=HTTPStatus.UNAUTHORIZED)


def init_app(app: Flask) -> None:
    """Register problem handlers on ``app`` and on the JWT manager."""

    # flask-jwt-extended rejections on protected routes
    @jwt.unauthorized_loader
    def _missing_token(reason: str):
        return problem(HTTPStatus.UNAUTHORIZED, reason)

    @jwt.invalid_token_loader
    def _invalid_token(reason: str):
        return problem(HTTPStatus.UNAUTHORIZED, reason)

    @jwt.expired_token_loader
    def _expired_token(jwt_header: dict[str, Any], jwt_payload: dict[str, Any]):
        return problem(HTTPStatus.UNAUTHORIZED, "Token has expired")

    @app.errorhandler(APIError)
    def _api_error(err: APIError):
        return problem(err.status_code, err.message, code=err.code)

    @app.errorhandler(HTTPException)
    def _http_error(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        if status == HTTPStatus.NOT_FOUND:
            detail = f"Route '{request.path}' not found"
        else:
            detail = (err.description or HTTPStatus(status).phrase).strip()
        return problem(status, detail)

    @app.errorhandler(MarshmallowValidationError)
    def _payload_error(err: MarshmallowValidationError):
        return problem(
            HTTPStatus.UNPROCESSABLE_ENTITY,
            "Validation failed",
            details={"errors": err.messages},
        )

    @app.errorhandler(OperationalError)
    def _database_unavailable(err: OperationalError):
        return problem(
            HTTPStatus.SERVICE_UNAVAILABLE, "Service temporarily unavailable", exc_info=True
        )

    @app.errorhandler(HashError)
    def _hashing_failed(err: HashError):
        return problem(
            HTTPStatus.INTERNAL_SERVER_ERROR, "Could not process credentials", exc_info=True
        )

    @app.errorhandler(Exception)
    def _unexpected(err: Exception):
        return problem(HTTPStatus.INTERNAL_SERVER_ERROR, "Unexpected error", exc_info=True)
