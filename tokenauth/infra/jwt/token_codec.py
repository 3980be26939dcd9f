# tokenauth/infra/jwt/token_codec.py
"""
Signed, expiring tokens for the two token classes.

Access tokens carry the user id only. Refresh tokens additionally carry the
user's token-version at issuance (claim ``tv``). Each class is signed with its
own secret. Access tokens use the claim layout flask-jwt-extended expects
(``sub`` as string, ``type``, ``jti``) so protected routes can verify them with
``verify_jwt_in_request``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import uuid4

import jwt

from tokenauth.services._shared.errors import TokenExpired, TokenInvalid

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


@dataclass(frozen=True, slots=True)
class TokenCodecConfig:
    """
    Immutable signing configuration.

    :param access_secret: HMAC secret for access tokens.
    :type access_secret: str
    :param refresh_secret: HMAC secret for refresh tokens.
    :type refresh_secret: str
    :param access_ttl: Access token lifetime.
    :type access_ttl: timedelta
    :param refresh_ttl: Refresh token lifetime.
    :type refresh_ttl: timedelta
    :param algorithm: JWS algorithm.
    :type algorithm: str
    """

    access_secret: str
    refresh_secret: str
    access_ttl: timedelta = timedelta(minutes=15)
    refresh_ttl: timedelta = timedelta(days=7)
    algorithm: str = "HS256"

    def __post_init__(self) -> None:
        if not self.access_secret or not self.refresh_secret:
            raise ValueError("Both access and refresh token secrets are required.")
        if self.access_secret == self.refresh_secret:
            raise ValueError("Access and refresh token secrets must differ.")


@dataclass(frozen=True, slots=True)
class AccessClaims:
    user_id: int
    expires_at: datetime


@dataclass(frozen=True, slots=True)
class RefreshClaims:
    user_id: int
    token_version: int
    expires_at: datetime


class TokenCodec:
    """Encode and decode access/refresh JWTs."""

    def __init__(self, config: TokenCodecConfig) -> None:
        self.config = config

    # ------------------------------------------------------------------ #
    # Primitives
    # ------------------------------------------------------------------ #

    def encode(self, claims: dict[str, Any], secret: str, ttl: timedelta) -> str:
        """
        Sign ``claims`` with an expiry of now + ``ttl``.

        :param claims: Payload; ``iat``, ``exp`` and ``jti`` are added.
        :param secret: Signing secret.
        :param ttl: Lifetime of the token.
        :returns: Encoded JWT.
        """
        now = self.now_utc()
        payload = dict(claims)
        payload.setdefault("jti", uuid4().hex)
        payload["iat"] = now
        payload["exp"] = now + ttl
        return jwt.encode(payload, secret, algorithm=self.config.algorithm)

    def decode(self, token: str, secret: str) -> dict[str, Any]:
        """
        Verify signature and expiry and return the claims.

        :raises TokenExpired: When the embedded expiry has passed.
        :raises TokenInvalid: On bad signature or malformed structure.
        """
        try:
            return jwt.decode(
                token,
                secret,
                algorithms=[self.config.algorithm],
                options={"require": ["exp", "sub"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpired(str(exc)) from exc
        except jwt.InvalidTokenError as exc:
            raise TokenInvalid(str(exc)) from exc

    # ------------------------------------------------------------------ #
    # Token classes
    # ------------------------------------------------------------------ #

    def create_access_token(self, user_id: int) -> str:
        claims = {"sub": str(user_id), "type": ACCESS_TOKEN_TYPE, "fresh": False}
        return self.encode(claims, self.config.access_secret, self.config.access_ttl)

    def create_refresh_token(self, user_id: int, token_version: int) -> str:
        claims = {"sub": str(user_id), "type": REFRESH_TOKEN_TYPE, "tv": int(token_version)}
        return self.encode(claims, self.config.refresh_secret, self.config.refresh_ttl)

    def decode_access_token(self, token: str) -> AccessClaims:
        payload = self.decode(token, self.config.access_secret)
        self._expect_type(payload, ACCESS_TOKEN_TYPE)
        return AccessClaims(
            user_id=self._coerce_user_id(payload["sub"]),
            expires_at=datetime.fromtimestamp(int(payload["exp"]), tz=UTC),
        )

    def decode_refresh_token(self, token: str) -> RefreshClaims:
        """
        Decode a refresh token into typed claims.

        Signature and expiry are checked here; the token-version comparison
        against the stored user is the caller's job.
        """
        payload = self.decode(token, self.config.refresh_secret)
        self._expect_type(payload, REFRESH_TOKEN_TYPE)
        tv = payload.get("tv")
        if not isinstance(tv, int) or isinstance(tv, bool):
            raise TokenInvalid("Token is missing the token version claim.")
        return RefreshClaims(
            user_id=self._coerce_user_id(payload["sub"]),
            token_version=tv,
            expires_at=datetime.fromtimestamp(int(payload["exp"]), tz=UTC),
        )

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _expect_type(payload: dict[str, Any], expected: str) -> None:
        if payload.get("type") != expected:
            raise TokenInvalid(f"Wrong token type: {expected} token required.")

    @staticmethod
    def _coerce_user_id(subject: Any) -> int:
        """Ensure the JWT subject can be treated as an integer user id."""
        if isinstance(subject, str) and subject.isdigit():
            return int(subject)
        raise TokenInvalid("Invalid token subject.")

    @staticmethod
    def now_utc() -> datetime:
        return datetime.now(UTC)
