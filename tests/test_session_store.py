"""Tests for the cookie-backed session store."""

from __future__ import annotations

import json
from dataclasses import replace

import pytest

from conftest import PROFILE
from mediadesk.utils.navigation import View, resolve_view
from mediadesk.utils.session import (
    SessionContext,
    SessionWriteError,
    clear_session,
    load_session,
    write_session,
)


def _set_cookies(response):
    return response.headers.getlist("Set-Cookie")


def test_load_session_reads_all_three_values():
    cookies = {
        "access_token": "tok-1",
        "user_data": json.dumps(PROFILE),
        "userRegistered": "true",
    }

    session = load_session(cookies)

    assert session.access_token == "tok-1"
    assert session.user_id == 7
    assert session.is_registered is True
    assert session.profile().preferred_location.name == "London"


def test_load_session_ignores_unparseable_user_data():
    session = load_session({"access_token": "tok-1", "user_data": "{not json"})

    assert session.is_authenticated
    assert session.user is None
    assert session.user_id is None


def test_registered_flag_requires_literal_true():
    session = load_session({"access_token": "tok-1", "userRegistered": "yes"})

    assert session.registered is False


def test_write_session_sets_every_cookie_with_fixed_attributes(app, app_config):
    with app.test_request_context():
        response = app.make_response(("", 200))
        written = write_session(response, "tok-1", PROFILE, True, config=app_config)

    cookies = _set_cookies(response)
    assert len(cookies) == 3
    for header in cookies:
        assert "SameSite=Strict" in header
        assert "Path=/" in header
        assert "Secure" not in header
    assert any(header.startswith("access_token=tok-1") for header in cookies)
    assert any(header.startswith("userRegistered=true") for header in cookies)
    assert written.user_id == 7


def test_write_session_marks_cookies_secure_in_production(app, app_config):
    production = replace(app_config, environment="production")
    with app.test_request_context():
        response = app.make_response(("", 200))
        write_session(response, "tok-1", PROFILE, False, config=production)

    for header in _set_cookies(response):
        assert "Secure" in header


def test_write_session_without_token_writes_nothing(app, app_config):
    with app.test_request_context():
        response = app.make_response(("", 200))
        with pytest.raises(SessionWriteError):
            write_session(response, None, PROFILE, True, config=app_config)

    assert _set_cookies(response) == []


def test_write_session_with_unserializable_user_writes_nothing(app, app_config):
    with app.test_request_context():
        response = app.make_response(("", 200))
        with pytest.raises(SessionWriteError):
            write_session(response, "tok-1", {"id": object()}, True, config=app_config)

    assert _set_cookies(response) == []


def test_clear_session_expires_all_cookies(app, app_config):
    with app.test_request_context():
        response = app.make_response(("", 200))
        cleared = clear_session(response, config=app_config)

    cookies = _set_cookies(response)
    assert len(cookies) == 3
    assert all("Expires=Thu, 01 Jan 1970" in header for header in cookies)
    assert cleared.is_authenticated is False


@pytest.mark.parametrize(
    "session, expected",
    [
        (SessionContext(), View.LANDING),
        (SessionContext(access_token="tok", user=PROFILE), View.COMPLETE_PROFILE),
        (SessionContext(access_token="tok", user=PROFILE, registered=True), View.PROFILE),
        (SessionContext(user=PROFILE, registered=True), View.LANDING),
    ],
)
def test_resolve_view(session, expected):
    assert resolve_view(session) is expected
