"""Flask CLI commands for operating on user sessions."""

from __future__ import annotations

import logging

import click
from flask import Flask
from flask.cli import with_appcontext

from tokenauth.core.extensions import db
from tokenauth.services._shared.errors import UserNotFound
from tokenauth.services._shared.ports import InMemoryTokenTransport
from tokenauth.services.revocation import RevocationService

LOGGER = logging.getLogger(__name__)


@click.group("auth")
def auth_cli() -> None:
    """Credential and session maintenance commands."""


@auth_cli.command("revoke-sessions")
@click.argument("user_id", type=click.IntRange(min=1))
@with_appcontext
def revoke_sessions_command(user_id: int) -> None:
    """Invalidate every refresh token issued to USER_ID."""
    service = RevocationService(transport=InMemoryTokenTransport())
    try:
        version = service.revoke_all(user_id)
    except UserNotFound as exc:
        raise click.ClickException(f"User {user_id} not found.") from exc
    click.echo(f"Revoked sessions for user {user_id} (token_version={version}).")


@auth_cli.command("init-db")
@with_appcontext
def init_db_command() -> None:
    """Create all tables for local development (use migrations elsewhere)."""
    db.create_all()
    LOGGER.info("cli.init_db")
    click.echo("Database tables created.")


def init_app(app: Flask) -> None:
    """Register application-specific CLI command groups.

    Parameters
    ----------
    app:
        Flask application instance whose CLI registry will receive the
        ``auth`` command group.
    """
    app.cli.add_command(auth_cli)
