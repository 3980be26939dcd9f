"""CORS policy for the API blueprints."""

from __future__ import annotations

from flask import Flask
from flask_cors import CORS


def _parse_origins(raw: str | None) -> list[str]:
    return [origin.strip() for origin in (raw or "").split(",") if origin.strip()]


def init_app(app: Flask) -> None:
    """Apply ``CORS_ORIGINS`` to ``/api/*``.

    Browsers only send the ``jid`` refresh cookie cross-origin with
    credentials, and credentials cannot be combined with a wildcard origin.
    An explicit origin list enables credentials; blank or ``"*"`` allows any
    origin without them.
    """
    origins = _parse_origins(app.config.get("CORS_ORIGINS"))
    allow_any = not origins or origins == ["*"]

    CORS(
        app,
        resources={r"/api/*": {"origins": "*" if allow_any else origins}},
        supports_credentials=not allow_any,
        expose_headers=["X-Request-ID"],
        max_age=app.config.get("CORS_MAX_AGE", 600),
    )
