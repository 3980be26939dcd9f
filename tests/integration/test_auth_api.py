"""Integration tests for /api/v1/auth endpoints."""

from __future__ import annotations

from tests.factories.user import UserFactory
from tests.helpers.tokens import flip_signature

BASE = "/api/v1/auth"


def _jid(client):
    cookie = client.get_cookie("jid")
    return None if cookie is None else cookie.value


def _login(client, username, password="Passw0rd!"):
    return client.post(f"{BASE}/login", json={"username": username, "password": password})


def _bearer(token):
    return {"Authorization": f"Bearer {token}"}


class TestRegister:
    def test_created_with_access_token_only(self, client, session):
        res = client.post(
            f"{BASE}/register",
            json={"username": "alice", "email": "a@x.com", "password": "pw123"},
        )

        assert res.status_code == 201
        body = res.get_json()
        assert set(body) == {"user", "accessToken"}
        assert body["user"]["username"] == "alice"
        assert _jid(client) is None

    def test_duplicate_returns_field_errors(self, client, session):
        UserFactory(username="alice", email="a@x.com")

        res = client.post(
            f"{BASE}/register",
            json={"username": "alice", "email": "other@x.com", "password": "pw123"},
        )

        assert res.status_code == 400
        assert res.get_json() == {
            "errors": [{"field": "username", "message": "username already taken."}]
        }

    def test_schema_validation_is_a_problem_response(self, client, session):
        res = client.post(f"{BASE}/register", json={"username": "alice"})

        assert res.status_code == 422
        assert res.mimetype == "application/problem+json"
        problem = res.get_json()
        assert problem["code"] == "validation_error"
        assert set(problem["details"]["errors"]) == {"email", "password"}


class TestLogin:
    def test_sets_http_only_refresh_cookie(self, client, session):
        UserFactory(username="alice", password="pw123")

        res = _login(client, "alice", "pw123")

        assert res.status_code == 200
        body = res.get_json()
        assert set(body) == {"user", "accessToken"}
        set_cookie = res.headers.get("Set-Cookie")
        assert set_cookie.startswith("jid=")
        assert "HttpOnly" in set_cookie
        assert _jid(client) not in res.get_data(as_text=True)

    def test_bad_credentials_are_401(self, client, session):
        UserFactory(username="alice", password="pw123")

        wrong = _login(client, "alice", "nope")
        unknown = _login(client, "nobody", "pw123")

        assert wrong.status_code == unknown.status_code == 401
        assert wrong.get_json() == unknown.get_json() == {
            "errors": [{"field": "credentials", "message": "Invalid login."}]
        }
        assert _jid(client) is None

    def test_requires_username_or_email(self, client, session):
        res = client.post(f"{BASE}/login", json={"password": "pw123"})

        assert res.status_code == 422


class TestRefresh:
    def test_rotates_cookie(self, client, session):
        UserFactory(username="alice")
        _login(client, "alice")
        first = _jid(client)

        res = client.post(f"{BASE}/refresh_token")

        assert res.status_code == 200
        assert res.get_json()["user"]["username"] == "alice"
        assert _jid(client) not in (None, first)

    def test_without_cookie_is_401(self, client, session):
        res = client.post(f"{BASE}/refresh_token")

        assert res.status_code == 401
        assert res.get_json() == {
            "errors": [{"field": "refresh token", "message": "No refresh token was supplied."}]
        }


class TestLogout:
    def test_clears_cookie(self, client, session):
        UserFactory(username="alice")
        _login(client, "alice")
        assert _jid(client) is not None

        res = client.post(f"{BASE}/logout")

        assert res.status_code == 200
        assert res.get_json() == {"ok": True}
        assert _jid(client) is None

    def test_with_id_revokes_every_session(self, client, app, session):
        user = UserFactory(username="alice")
        other_device = app.test_client()
        _login(other_device, "alice")
        access = _login(client, "alice").get_json()["accessToken"]

        res = client.post(f"{BASE}/logout", json={"id": user.id}, headers=_bearer(access))

        assert res.status_code == 200
        refreshed = other_device.post(f"{BASE}/refresh_token")
        assert refreshed.status_code == 401
        assert refreshed.get_json()["errors"][0]["message"] == "your token is outdated."

    def test_with_id_without_access_token_clears_cookie_only(self, client, session):
        alice = UserFactory(username="alice")
        _login(client, "alice")

        res = client.post(f"{BASE}/logout", json={"id": alice.id})

        assert res.status_code == 200
        assert res.get_json() == {"ok": True}
        assert _jid(client) is None
        session.expire_all()
        assert alice.token_version == 0

    def test_with_id_of_another_user_clears_cookie_only(self, client, session):
        alice = UserFactory(username="alice")
        UserFactory(username="bob")
        bob_access = _login(client, "bob").get_json()["accessToken"]

        res = client.post(f"{BASE}/logout", json={"id": alice.id}, headers=_bearer(bob_access))

        assert res.status_code == 200
        assert res.get_json() == {"ok": True}
        assert _jid(client) is None
        session.expire_all()
        assert alice.token_version == 0

    def test_with_id_and_expired_access_token_clears_cookie_only(
        self, client, codec, session, freeze_time
    ):
        alice = UserFactory(username="alice")
        with freeze_time("2026-01-01"):
            expired = codec.create_access_token(alice.id)
        _login(client, "alice")

        res = client.post(f"{BASE}/logout", json={"id": alice.id}, headers=_bearer(expired))

        assert res.status_code == 200
        assert res.get_json() == {"ok": True}
        assert _jid(client) is None
        session.expire_all()
        assert alice.token_version == 0

    def test_tampered_access_token_does_not_block_logout(self, client, session):
        alice = UserFactory(username="alice")
        access = _login(client, "alice").get_json()["accessToken"]

        res = client.post(
            f"{BASE}/logout", json={"id": alice.id}, headers=_bearer(flip_signature(access))
        )

        assert res.status_code == 200
        assert _jid(client) is None
        session.expire_all()
        assert alice.token_version == 0


class TestMe:
    def test_returns_current_user(self, client, session):
        UserFactory(username="alice")
        access = _login(client, "alice").get_json()["accessToken"]

        res = client.get(f"{BASE}/me", headers=_bearer(access))

        assert res.status_code == 200
        assert res.get_json()["user"]["username"] == "alice"

    def test_requires_access_token(self, client, session):
        res = client.get(f"{BASE}/me")

        assert res.status_code == 401
        assert res.mimetype == "application/problem+json"

    def test_rejects_refresh_token_as_bearer(self, client, session):
        UserFactory(username="alice")
        _login(client, "alice")

        res = client.get(f"{BASE}/me", headers=_bearer(_jid(client)))

        assert res.status_code == 401


def test_register_login_revoke_refresh_scenario(client, app, session):
    """Register, collide on email, log in, revoke all, then refresh the stale token."""
    res = client.post(
        f"{BASE}/register", json={"username": "alice", "email": "a@x.com", "password": "pw123"}
    )
    assert res.status_code == 201
    assert res.get_json()["accessToken"]
    alice_id = res.get_json()["user"]["id"]

    res = client.post(
        f"{BASE}/register", json={"username": "alice2", "email": "a@x.com", "password": "pw123"}
    )
    assert res.get_json() == {"errors": [{"field": "email", "message": "email already taken."}]}

    res = _login(client, "alice", "pw123")
    assert res.status_code == 200
    pre_revocation = _jid(client)
    assert pre_revocation

    runner = app.test_cli_runner()
    result = runner.invoke(args=["auth", "revoke-sessions", str(alice_id)])
    assert result.exit_code == 0, result.output

    res = client.post(f"{BASE}/refresh_token")
    assert res.status_code == 401
    [error] = res.get_json()["errors"]
    assert error["field"] == "refresh token"
    assert "outdated" in error["message"]
