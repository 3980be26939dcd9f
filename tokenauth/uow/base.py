"""Unit of Work contract the credential and session services depend on."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tokenauth.repositories.user import UserRepository


class UnitOfWork(ABC):
    """
    One transaction around a use case.

    ``users`` is bound to the transaction, so a user insert or a
    token-version bump either lands completely or not at all.
    """

    users: UserRepository

    @abstractmethod
    def __enter__(self) -> UnitOfWork: ...

    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> None: ...

    @abstractmethod
    def commit(self) -> None: ...

    @abstractmethod
    def rollback(self) -> None: ...
