"""Factory Boy definition for :class:`tokenauth.models.user.User`."""

from __future__ import annotations

import factory

from tests.factories import BaseFactory
from tokenauth.infra.security.password_hasher import Argon2PasswordHasher
from tokenauth.models.user import User

# Same low costs as TestingConfig.
_hasher = Argon2PasswordHasher(time_cost=1, memory_cost=8 * 1024, parallelism=1)


class UserFactory(BaseFactory):
    """
    Build persisted :class:`tokenauth.models.user.User` instances.

    Pass ``password=`` to choose the plaintext; it is hashed with argon2id.
    """

    class Meta:
        model = User

    class Params:
        password = "Passw0rd!"

    id = None  # let autoincrement handle it
    email = factory.Sequence(lambda n: f"user{n}@example.com")
    username = factory.Sequence(lambda n: f"user{n}")
    password_hash = factory.LazyAttribute(lambda o: _hasher.hash(o.password))
    token_version = 0
