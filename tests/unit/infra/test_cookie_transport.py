"""Unit tests for the HTTP-only refresh cookie transport."""

from __future__ import annotations

from tokenauth.infra.http.cookie_transport import FlaskCookieTransport


def _set_cookie_headers(app):
    response = app.process_response(app.response_class())
    return response.headers.getlist("Set-Cookie")


def test_from_config_uses_refresh_ttl_and_cookie_settings(app):
    transport = FlaskCookieTransport.from_config(app.config)

    assert transport.cookie_name == "jid"
    assert transport.max_age == app.config["REFRESH_TOKEN_TTL_SECONDS"]
    assert transport.samesite == app.config["REFRESH_COOKIE_SAMESITE"]


def test_read_returns_inbound_cookie(app):
    transport = FlaskCookieTransport()
    with app.test_request_context(headers={"Cookie": "jid=abc.def.ghi"}):
        assert transport.read() == "abc.def.ghi"


def test_read_returns_none_without_cookie(app):
    transport = FlaskCookieTransport()
    with app.test_request_context():
        assert transport.read() is None


def test_set_writes_http_only_cookie(app):
    transport = FlaskCookieTransport(secure=True, samesite="Strict", max_age=60)
    with app.test_request_context():
        transport.set("token-value")
        [header] = _set_cookie_headers(app)

    assert header.startswith("jid=token-value")
    assert "HttpOnly" in header
    assert "Secure" in header
    assert "SameSite=Strict" in header
    assert "Max-Age=60" in header


def test_clear_expires_cookie(app):
    transport = FlaskCookieTransport()
    with app.test_request_context(headers={"Cookie": "jid=old"}):
        transport.clear()
        [header] = _set_cookie_headers(app)

    assert header.startswith("jid=;")
    assert "Max-Age=0" in header
