# tests/test_password_reset.py
import re
from datetime import timedelta

import pytest

from notekeeper.auth import service
from notekeeper.common import mailer, utils
from notekeeper.common.errors import EmailDeliveryFailed, InvalidOrExpiredToken
from notekeeper.users.models import User

LINK = re.compile(r"/reset-password/([0-9a-f]+)")


def _raw_token(message):
    return LINK.search(message.get_content()).group(1)


def test_forgot_then_reset_over_http(client, alice, outbox):
    r = client.post("/api/users/forgot-password", json={"email": "alice@x.com"})
    assert r.status_code == 200
    assert r.get_json() == {"success": True, "data": "Email sent"}

    assert len(outbox) == 1
    msg = outbox[0]
    assert msg["To"] == "alice@x.com"
    sender = msg["From"].addresses[0]
    assert (sender.display_name, sender.addr_spec) == ("Notes App", "noreply@notesapp.com")
    token = _raw_token(msg)

    r = client.post(f"/api/users/reset-password/{token}", json={"password": "fresh-pw"})
    assert r.status_code == 200
    assert r.get_json()["success"] is True

    assert client.post("/api/users/login", json={"email": "alice@x.com", "password": "pw123456"}).status_code == 401
    assert client.post("/api/users/login", json={"email": "alice@x.com", "password": "fresh-pw"}).status_code == 200

    # usage unique
    r = client.post(f"/api/users/reset-password/{token}", json={"password": "again"})
    assert r.status_code == 400
    assert r.get_json()["error"]["code"] == "invalid_reset_token"


def test_forgot_unknown_email(client):
    r = client.post("/api/users/forgot-password", json={"email": "ghost@x.com"})
    assert r.status_code == 404


def test_tampered_token_rejected(client, alice, outbox):
    client.post("/api/users/forgot-password", json={"email": "alice@x.com"})
    token = _raw_token(outbox[0])
    tampered = ("0" if token[0] != "0" else "1") + token[1:]

    r = client.post(f"/api/users/reset-password/{tampered}", json={"password": "x"})
    assert r.status_code == 400
    assert r.get_json()["error"]["code"] == "invalid_reset_token"


def test_only_hash_is_stored(ctx, alice, outbox):
    service.forgot_password("alice@x.com")
    token = _raw_token(outbox[0])

    user = User.query.filter_by(email="alice@x.com").one()
    assert user.reset_password_token == service.hash_reset_token(token)
    assert user.reset_password_token != token
    assert user.reset_password_expire is not None


def test_new_request_overwrites_previous_token(ctx, alice, outbox):
    service.forgot_password("alice@x.com")
    service.forgot_password("alice@x.com")
    first, second = (_raw_token(m) for m in outbox)

    with pytest.raises(InvalidOrExpiredToken):
        service.reset_password(first, "pw-1")
    service.reset_password(second, "pw-2")

    user = User.query.filter_by(email="alice@x.com").one()
    assert not user.has_pending_reset


def test_reset_after_expiry_window(ctx, alice, outbox, monkeypatch):
    service.forgot_password("alice@x.com")
    token = _raw_token(outbox[0])

    later = utils.utcnow() + timedelta(minutes=10, seconds=1)
    monkeypatch.setattr(utils, "utcnow", lambda: later)

    with pytest.raises(InvalidOrExpiredToken):
        service.reset_password(token, "too-late")


def test_reset_just_before_expiry(ctx, alice, outbox, monkeypatch):
    service.forgot_password("alice@x.com")
    token = _raw_token(outbox[0])

    later = utils.utcnow() + timedelta(minutes=9)
    monkeypatch.setattr(utils, "utcnow", lambda: later)

    service.reset_password(token, "in-time")
    assert service.login("alice@x.com", "in-time")["token"]


def test_mail_failure_rolls_back_reset_state(client, ctx, alice, monkeypatch):
    def boom(to, subject, body):
        raise mailer.MailDeliveryError("smtp down")

    monkeypatch.setattr(mailer, "send_email", boom)

    r = client.post("/api/users/forgot-password", json={"email": "alice@x.com"})
    assert r.status_code == 500
    assert r.get_json()["error"]["code"] == "email_delivery_failed"

    user = User.query.filter_by(email="alice@x.com").one()
    assert user.reset_password_token is None
    assert user.reset_password_expire is None

    with pytest.raises(EmailDeliveryFailed):
        service.forgot_password("alice@x.com")


def test_reset_requires_password(client):
    r = client.post("/api/users/reset-password/abc", json={})
    assert r.status_code == 400
    assert r.get_json()["error"]["code"] == "invalid_input"
