"""User model definition for the credential service."""

from __future__ import annotations

from sqlalchemy import Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, validates

from tokenauth.core.extensions import db

from .base import FieldValueError, PKMixin, ReprMixin, TimestampMixin


class User(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Authentication identity.

    Fields
    ------
    username : str
        Public handle. Unique per system.
    email : str
        Login email. Stored normalized (lowercase, trimmed). Unique.
    password_hash : str
        argon2id digest; the plaintext is never stored.
    token_version : int
        Revocation counter. Starts at 0 and is only incremented by an explicit
        revocation; every refresh token embeds the value current at issuance.
    created_at : datetime
        Creation timestamp (from mixin).
    updated_at : datetime
        Update timestamp (from mixin).
    """

    __tablename__ = "users"

    # Columns
    username: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(String(254), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    token_version: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")

    # Constraint names are mapped to fields by the credential service.
    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        UniqueConstraint("username", name="uq_users_username"),
    )

    # -------------------- Validators --------------------
    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        """
        Normalize and validate email.

        :raises FieldValueError: If email is missing or malformed.
        """
        if not value or not isinstance(value, str):
            raise FieldValueError("email", "Email is required.")
        v = value.strip().lower()
        # Minimal sanity check; full validation happens at API layer.
        if "@" not in v or "." not in v.split("@")[-1]:
            raise FieldValueError("email", "Email format looks invalid.")
        return v

    @validates("username")
    def _normalize_username(self, key: str, value: str) -> str:
        """
        Normalize and validate username.

        :raises FieldValueError: If username is missing or only whitespace.
        """
        if not isinstance(value, str):
            raise FieldValueError("username", "Username is required.")
        v = value.strip()
        if not v:
            raise FieldValueError("username", "Username is required.")
        return v
