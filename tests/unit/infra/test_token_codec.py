"""Unit tests for the access/refresh token codec."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import jwt
import pytest

from tests.helpers.tokens import flip_signature
from tokenauth.infra.jwt.token_codec import TokenCodec, TokenCodecConfig
from tokenauth.services._shared.errors import TokenExpired, TokenInvalid


@pytest.fixture()
def local_codec() -> TokenCodec:
    return TokenCodec(
        TokenCodecConfig(
            access_secret="access-secret-for-unit-tests-0123456789",
            refresh_secret="refresh-secret-for-unit-tests-0123456789",
            access_ttl=timedelta(minutes=15),
            refresh_ttl=timedelta(days=7),
        )
    )


class TestTokenCodecConfig:
    def test_rejects_missing_secret(self):
        with pytest.raises(ValueError):
            TokenCodecConfig(access_secret="", refresh_secret="r" * 32)

    def test_rejects_shared_secret(self):
        with pytest.raises(ValueError):
            TokenCodecConfig(access_secret="s" * 32, refresh_secret="s" * 32)

    def test_is_immutable(self, local_codec):
        from dataclasses import FrozenInstanceError

        with pytest.raises(FrozenInstanceError):
            local_codec.config.access_secret = "other"  # type: ignore[misc]


class TestAccessTokens:
    def test_round_trip_carries_user_id_only(self, local_codec):
        token = local_codec.create_access_token(42)

        claims = local_codec.decode_access_token(token)
        payload = jwt.decode(
            token, local_codec.config.access_secret, algorithms=["HS256"]
        )

        assert claims.user_id == 42
        assert payload["sub"] == "42"
        assert payload["type"] == "access"
        assert "tv" not in payload

    def test_expiry_follows_ttl(self, local_codec, freeze_time):
        with freeze_time("2026-01-01 12:00:00"):
            claims = local_codec.decode_access_token(local_codec.create_access_token(1))

        assert claims.expires_at == datetime(2026, 1, 1, 12, 15, tzinfo=UTC)

    def test_refresh_token_is_not_an_access_token(self, local_codec):
        refresh = local_codec.create_refresh_token(1, 0)

        # Signed with the other secret, so it fails at the signature check.
        with pytest.raises(TokenInvalid):
            local_codec.decode_access_token(refresh)


class TestRefreshTokens:
    def test_embeds_token_version(self, local_codec):
        claims = local_codec.decode_refresh_token(local_codec.create_refresh_token(7, 3))

        assert claims.user_id == 7
        assert claims.token_version == 3

    def test_expired_and_tampered_are_distinguished(self, local_codec, freeze_time):
        with freeze_time("2026-01-01 00:00:00"):
            token = local_codec.create_refresh_token(7, 0)

        with freeze_time("2026-01-08 00:00:01"):
            with pytest.raises(TokenExpired) as expired:
                local_codec.decode_refresh_token(token)

        tampered = flip_signature(token)
        with freeze_time("2026-01-02 00:00:00"):
            with pytest.raises(TokenInvalid) as invalid:
                local_codec.decode_refresh_token(tampered)

        assert expired.value.message != invalid.value.message
        assert expired.value.field == invalid.value.field == "refresh token"

    def test_still_valid_just_before_expiry(self, local_codec, freeze_time):
        with freeze_time("2026-01-01 00:00:00"):
            token = local_codec.create_refresh_token(7, 0)
        with freeze_time("2026-01-07 23:59:59"):
            assert local_codec.decode_refresh_token(token).user_id == 7

    def test_signed_with_wrong_secret_is_invalid(self, local_codec):
        forged = jwt.encode(
            {
                "sub": "7",
                "type": "refresh",
                "tv": 0,
                "exp": datetime.now(UTC) + timedelta(hours=1),
            },
            "attacker-secret-0123456789-0123456789",
            algorithm="HS256",
        )
        with pytest.raises(TokenInvalid):
            local_codec.decode_refresh_token(forged)

    @pytest.mark.parametrize(
        "claims",
        [
            {"sub": "7", "type": "refresh"},  # no tv
            {"sub": "7", "type": "refresh", "tv": "0"},  # tv not an int
            {"sub": "7", "type": "access", "tv": 0},  # wrong class
            {"sub": "abc", "type": "refresh", "tv": 0},  # non-numeric subject
        ],
    )
    def test_rejects_unexpected_claims(self, local_codec, claims):
        token = local_codec.encode(
            claims, local_codec.config.refresh_secret, timedelta(minutes=5)
        )
        with pytest.raises(TokenInvalid):
            local_codec.decode_refresh_token(token)

    def test_garbage_is_invalid(self, local_codec):
        with pytest.raises(TokenInvalid):
            local_codec.decode_refresh_token("not.a.jwt")
