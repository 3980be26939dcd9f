"""WSGI entrypoint used by gunicorn (``gunicorn tokenauth.wsgi:app``)."""

from __future__ import annotations

from tokenauth.factory import create_app

app = create_app()
