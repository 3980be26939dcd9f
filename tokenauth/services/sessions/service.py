from __future__ import annotations

import logging

from tokenauth.infra.jwt.token_codec import TokenCodec
from tokenauth.services._shared.base import BaseService, ServiceContext
from tokenauth.services._shared.dto import UserResponse
from tokenauth.services._shared.errors import (
    TokenError,
    TokenMissing,
    TokenVersionMismatch,
    UserNotFound,
)
from tokenauth.services._shared.ports import TokenTransport

log = logging.getLogger(__name__)


class SessionService(BaseService):
    """
    Refresh-token rotation.

    A refresh token is accepted only when its signature is valid, it has not
    expired, its subject still exists and its ``tv`` claim equals the user's
    current token version. Revocation bumps that version, which invalidates
    every refresh token issued earlier.

    :param codec: Token codec.
    :param transport: Channel the refresh token is read from and written to.
    """

    def __init__(
        self,
        *,
        codec: TokenCodec,
        transport: TokenTransport,
        ctx: ServiceContext | None = None,
    ) -> None:
        super().__init__(ctx=ctx)
        self.codec = codec
        self.transport = transport

    def refresh(self) -> UserResponse:
        """
        Exchange the inbound refresh token for a new access/refresh pair.

        The token version is left untouched; only revocation changes it.

        :returns: Success with user + access token, or a ``"refresh token"``
            field error describing the rejection.
        """
        try:
            token = self.transport.read()
            if not token:
                raise TokenMissing()

            claims = self.codec.decode_refresh_token(token)

            with self.ro_uow() as uow:
                user = uow.users.get(claims.user_id)
                if user is None:
                    raise UserNotFound()
                if user.token_version != claims.token_version:
                    raise TokenVersionMismatch()
                public = self.to_user_public(user)
                token_version = user.token_version
        except TokenError as exc:
            log.warning("refresh.rejected reason=%s", type(exc).__name__)
            return self.as_failure(exc)

        self.transport.set(self.codec.create_refresh_token(public.id, token_version))
        log.info("refresh.rotated user_id=%s", public.id)
        return UserResponse.success(public, self.codec.create_access_token(public.id))
