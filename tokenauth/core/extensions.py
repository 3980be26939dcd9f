"""Global Flask extension instances and initialization helpers."""

from __future__ import annotations

from datetime import timedelta

from flask import Flask, current_app
from flask_jwt_extended import JWTManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import MetaData

from tokenauth.infra.jwt.token_codec import TokenCodec, TokenCodecConfig
from tokenauth.infra.security.password_hasher import Argon2PasswordHasher

# Global naming convention for all constraints. Unique constraint names are
# part of the contract with the credential service (constraint -> field table).
convention = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=convention)

# Global singletons (import-safe)
db: SQLAlchemy = SQLAlchemy(session_options={"autoflush": False}, metadata=metadata)
migrate = Migrate(render_as_batch=True)
jwt = JWTManager()
limiter = Limiter(key_func=get_remote_address)

_CODEC_KEY = "tokenauth.token_codec"
_HASHER_KEY = "tokenauth.password_hasher"


def init_app(app: Flask) -> None:
    """Initialize SQLAlchemy, migrations, JWT, rate limiting and auth primitives.

    Parameters
    ----------
    app: flask.Flask
        Application used to bind extension instances. This call imports the
        :mod:`tokenauth.models` package to ensure SQLAlchemy metadata is ready
        for migrations.
    """
    db.init_app(app)

    # Ensure models are imported so Alembic sees metadata
    from tokenauth import models as _models  # noqa: F401

    migrate.init_app(app, db)
    jwt.init_app(app)
    limiter.init_app(app)

    app.extensions[_CODEC_KEY] = TokenCodec(
        TokenCodecConfig(
            access_secret=app.config["ACCESS_TOKEN_SECRET"],
            refresh_secret=app.config["REFRESH_TOKEN_SECRET"],
            access_ttl=timedelta(seconds=int(app.config["ACCESS_TOKEN_TTL_SECONDS"])),
            refresh_ttl=timedelta(seconds=int(app.config["REFRESH_TOKEN_TTL_SECONDS"])),
            algorithm=app.config.get("JWT_ALGORITHM", "HS256"),
        )
    )
    app.extensions[_HASHER_KEY] = Argon2PasswordHasher(
        time_cost=int(app.config["ARGON2_TIME_COST"]),
        memory_cost=int(app.config["ARGON2_MEMORY_COST"]),
        parallelism=int(app.config["ARGON2_PARALLELISM"]),
    )


def get_token_codec() -> TokenCodec:
    """Return the token codec bound to the current application."""
    codec = current_app.extensions.get(_CODEC_KEY)
    if codec is None:
        raise RuntimeError("Token codec is not initialized. Call init_app() first.")
    return codec


def get_password_hasher() -> Argon2PasswordHasher:
    """Return the password hasher bound to the current application."""
    hasher = current_app.extensions.get(_HASHER_KEY)
    if hasher is None:
        raise RuntimeError("Password hasher is not initialized. Call init_app() first.")
    return hasher
