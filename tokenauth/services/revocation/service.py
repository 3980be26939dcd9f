"""
RevocationService
=================

Logout and "sign out everywhere".

Revoking a user increments their token version in one atomic UPDATE. Every
refresh token issued before the bump carries a stale ``tv`` claim and is
rejected on its next use. Access tokens already issued stay valid until they
expire.
"""

from __future__ import annotations

import logging

from tokenauth.services._shared.base import BaseService, ServiceContext
from tokenauth.services._shared.errors import UserNotFound
from tokenauth.services._shared.ports import TokenTransport

log = logging.getLogger(__name__)


class RevocationService(BaseService):
    """
    Clear the client-held refresh token and revoke outstanding sessions.

    :param transport: Channel holding the client's refresh token.
    """

    def __init__(self, *, transport: TokenTransport, ctx: ServiceContext | None = None) -> None:
        super().__init__(ctx=ctx)
        self.transport = transport

    def logout(self, user_id: int | None = None) -> bool:
        """
        Clear the refresh token and, when ``user_id`` is given, revoke all of
        that user's sessions.

        :param user_id: User whose sessions should be revoked.
        :returns: Always ``True``; unknown users are logged and ignored.
        """
        self.transport.clear()
        if user_id is not None:
            try:
                self.revoke_all(user_id)
            except UserNotFound:
                log.warning("logout.unknown_user user_id=%s", user_id)
        return True

    def revoke_all(self, user_id: int) -> int:
        """
        Invalidate every refresh token issued so far for ``user_id``.

        :param user_id: Target user.
        :returns: The new token version.
        :raises UserNotFound: When the user does not exist.
        """
        with self.rw_uow() as uow:
            new_version = uow.users.bump_token_version(user_id)
            if new_version is None:
                raise UserNotFound()
        log.info(
            "sessions.revoked user_id=%s token_version=%s actor_id=%s",
            user_id,
            new_version,
            self.ctx.actor_id,
        )
        return new_version
