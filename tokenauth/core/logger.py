"""JSON logging with per-request correlation ids.

Every record carries the id of the request it was emitted in. The id comes
from ``X-Request-ID``/``X-Correlation-ID`` when the caller sends one and is
echoed back on the response.
"""

from __future__ import annotations

import json
import logging
import re
import sys
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from flask import Flask, Response, g, has_request_context, request

REQUEST_ID_HEADER = "X-Request-ID"
_INBOUND_HEADERS = (REQUEST_ID_HEADER, "X-Correlation-ID")

# Three base64url segments: a compact JWS.
_JWT_PATTERN = re.compile(r"eyJ[\w-]+\.[\w-]+\.[\w-]+")


class JSONFormatter(logging.Formatter):
    """One JSON object per line."""

    passthrough = ("endpoint", "elapsed_ms")

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "time": datetime.fromtimestamp(record.created, UTC).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": _JWT_PATTERN.sub("<redacted-token>", record.getMessage()),
            "request_id": getattr(record, "request_id", None),
        }
        for key in self.passthrough:
            value = getattr(record, key, None)
            if value is not None:
                entry[key] = value
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class RequestIdFilter(logging.Filter):
    """Stamp ``record.request_id`` (``None`` outside a request)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = ensure_request_id() if has_request_context() else None
        return True


def ensure_request_id() -> str:
    """
    Return the correlation id of the current request, assigning one if needed.

    Outside a request context a fresh id is returned on every call.
    """
    if not has_request_context():
        return str(uuid4())
    current = getattr(g, "request_id", None)
    if current is None:
        inbound = (request.headers.get(name) for name in _INBOUND_HEADERS)
        current = next((value for value in inbound if value), None) or str(uuid4())
        g.request_id = current
    return current


def configure_logging(level: str | int = "INFO") -> None:
    """Route the root logger to stdout as JSON lines at ``level``."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(RequestIdFilter())

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level.upper() if isinstance(level, str) else level)


def init_app(app: Flask) -> None:
    """Seed the request id early and echo it on every response."""
    app.logger.addFilter(RequestIdFilter())

    @app.before_request
    def _assign_request_id() -> None:
        ensure_request_id()

    @app.after_request
    def _echo_request_id(response: Response) -> Response:
        response.headers.setdefault(REQUEST_ID_HEADER, ensure_request_id())
        return response


__all__ = ["JSONFormatter", "RequestIdFilter", "configure_logging", "ensure_request_id", "init_app"]
