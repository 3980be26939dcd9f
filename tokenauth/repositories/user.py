"""User repository for persistence and token-version bookkeeping."""

from __future__ import annotations

from typing import cast

from sqlalchemy import select, update

from tokenauth.models.user import User
from tokenauth.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    It NEVER handles JWTs or password hashing; only DB-level user management
    and the token-version counter.
    """

    model = User

    def _filterable_fields(self):
        """Whitelist fields safe for equality filters."""
        return {
            "id": User.id,
            "email": User.email,
            "username": User.username,
        }

    # ---------------------------- Lookup helpers ----------------------------

    def get_by_username(self, username: str) -> User | None:
        """Fetch a user by exact (trimmed) username."""
        stmt = select(User).where(User.username == username.strip())
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def get_by_email(self, email: str) -> User | None:
        """Fetch a user by email (case-insensitive).

        :param email: Email address to normalise and search.
        :type email: str
        :returns: User instance or ``None`` when not found.
        :rtype: User | None
        """
        stmt = select(User).where(User.email == email.lower().strip())
        return cast(User | None, self.session.execute(stmt).scalars().first())

    # ---------------------------- Token version ----------------------------

    def get_token_version(self, user_id: int) -> int | None:
        """
        Return the current token_version, or ``None`` for unknown users.
        """
        stmt = select(User.token_version).where(User.id == user_id)
        value = self.session.execute(stmt).scalar_one_or_none()
        return None if value is None else int(value)

    def bump_token_version(self, user_id: int) -> int | None:
        """
        Atomically increment token_version.

        A single ``UPDATE ... SET token_version = token_version + 1`` so
        concurrent readers see either the old or the new value. The new value
        is re-read inside the same transaction.

        :returns: New token_version, or ``None`` when the user does not exist.
        """
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(token_version=User.token_version + 1)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        if result.rowcount == 0:
            return None
        # Loaded instances must not keep serving the stale counter.
        loaded = self.session.identity_map.get(self.session.identity_key(User, user_id))
        if loaded is not None:
            self.session.expire(loaded, ["token_version"])
        return self.get_token_version(user_id)
