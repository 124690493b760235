import pytest
from fastapi import HTTPException
from starlette.requests import Request
from unittest.mock import MagicMock

from printstream.utils import security


def _request(headers=None):
    raw = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
    return Request({"type": "http", "method": "GET", "path": "/", "headers": raw, "query_string": b""})


def test_bearer_token_wins_over_cookie():
    request = _request({"Authorization": "Bearer header-token", "Cookie": f"{security.COOKIE_NAME}=cookie-token"})
    assert security.extract_token(request) == "header-token"


def test_cookie_token_fallback():
    request = _request({"Cookie": f"{security.COOKIE_NAME}=cookie-token"})
    assert security.extract_token(request) == "cookie-token"
    assert security.extract_token(_request()) is None


def test_missing_token_is_unauthorized():
    with pytest.raises(HTTPException) as exc_info:
        security.get_current_user(_request())
    assert exc_info.value.status_code == 401
    assert exc_info.value.detail == "Unauthorized"


def test_invalid_token_is_unauthorized(monkeypatch):
    monkeypatch.setattr("printstream.profiles.repository.get_auth_user", MagicMock(side_effect=RuntimeError("bad jwt")))
    with pytest.raises(HTTPException) as exc_info:
        security.get_current_user(_request({"Authorization": "Bearer expired"}))
    assert exc_info.value.status_code == 401
    assert security.get_optional_user(_request({"Authorization": "Bearer expired"})) is None


def test_resolve_user_merges_profile_over_defaults(monkeypatch):
    monkeypatch.setattr(
        "printstream.profiles.repository.get_auth_user",
        lambda token: {"id": "user-1", "email": "user@example.com", "user_metadata": {"first_name": "Ada"}},
    )
    monkeypatch.setattr(
        "printstream.profiles.repository.get_profile",
        lambda uid: {"id": uid, "role": "admin", "subscription_status": None, "first_name": "Ada"},
    )
    user = security.resolve_user("tok")
    assert user["role"] == "admin"
    assert user["subscription_status"] == "none"
    assert user["token"] == "tok"
    assert user["metadata"] == {"first_name": "Ada"}


def test_missing_profile_defaults_to_plain_user(monkeypatch):
    monkeypatch.setattr("printstream.profiles.repository.get_auth_user", lambda token: {"id": "user-1"})
    monkeypatch.setattr("printstream.profiles.repository.get_profile", lambda uid: None)
    user = security.resolve_user("tok")
    assert (user["role"], user["subscription_status"]) == ("user", "none")


def test_admin_gate():
    with pytest.raises(HTTPException) as exc_info:
        security.require_admin({"id": "u", "role": "user"})
    assert exc_info.value.status_code == 403
    assert exc_info.value.detail == "Forbidden: Admin access required"
    assert security.require_admin({"id": "a", "role": "admin"})["id"] == "a"


@pytest.mark.parametrize("status, allowed", [
    ("active", True),
    ("trialing", True),
    ("past_due", False),
    ("canceled", False),
    ("none", False),
])
def test_subscription_gate(status, allowed):
    user = {"id": "u", "role": "user", "subscription_status": status}
    if allowed:
        assert security.require_subscription(user) is user
    else:
        with pytest.raises(HTTPException) as exc_info:
            security.require_subscription(user)
        assert exc_info.value.status_code == 403


def test_admin_without_subscription_is_not_exempt():
    with pytest.raises(HTTPException):
        security.require_subscription({"id": "a", "role": "admin", "subscription_status": "none"})
