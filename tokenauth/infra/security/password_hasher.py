"""argon2id password hashing.

Digests are self-describing PHC strings (``$argon2id$v=19$m=...,t=...,p=...$salt$hash``)
so parameters can change over time without breaking stored hashes.
"""

from __future__ import annotations

import logging

from argon2 import PasswordHasher, Type
from argon2.exceptions import HashingError, InvalidHashError, VerificationError

log = logging.getLogger(__name__)


class HashError(RuntimeError):
    """Raised when the hasher cannot produce a digest (e.g. memory exhaustion)."""


class Argon2PasswordHasher:
    """
    One-way hash and verify of plaintext passwords.

    :param time_cost: Number of argon2 iterations.
    :param memory_cost: Memory usage in KiB.
    :param parallelism: Number of parallel lanes.
    """

    def __init__(
        self,
        *,
        time_cost: int = 3,
        memory_cost: int = 64 * 1024,
        parallelism: int = 4,
    ) -> None:
        self._hasher = PasswordHasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
            type=Type.ID,
        )
        self._dummy_digest: str | None = None

    def hash(self, plaintext: str) -> str:
        """
        Hash ``plaintext`` with a fresh random salt.

        :param plaintext: Raw password.
        :returns: PHC-formatted argon2id digest.
        :raises HashError: If argon2 fails to allocate or compute the hash.
        """
        try:
            return self._hasher.hash(plaintext)
        except HashingError as exc:
            log.error("password_hasher.hash_failed")
            raise HashError("Password hashing failed.") from exc

    def verify(self, digest: str | None, plaintext: str) -> bool:
        """
        Check ``plaintext`` against ``digest``.

        Never raises for malformed or foreign digests; those simply do not match.

        :param digest: Stored digest.
        :param plaintext: Candidate password.
        :returns: ``True`` on match.
        """
        if not digest:
            return False
        try:
            return self._hasher.verify(digest, plaintext)
        except (VerificationError, InvalidHashError):
            return False

    def verify_dummy(self, plaintext: str) -> bool:
        """
        Run a full verification against a throwaway digest and return ``False``.

        Used when the account does not exist so response time does not reveal it.
        """
        if self._dummy_digest is None:
            self._dummy_digest = self.hash("tokenauth-timing-equalizer")
        self.verify(self._dummy_digest, plaintext)
        return False
