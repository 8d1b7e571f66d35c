from types import SimpleNamespace

import pytest

from splitledger.models.user import User
from splitledger.utils import telegram_dep
from splitledger.utils.user import get_display_name


@pytest.fixture
def fake_telegram(monkeypatch):
    """Подменяет проверку подписи initData: строка initData = telegram_id."""
    profiles = {}

    def validate(init_data):
        if init_data not in profiles:
            raise ValueError("bad hash")
        return SimpleNamespace(user=profiles[init_data])

    monkeypatch.setattr(telegram_dep.authenticator, "validate", validate)
    return profiles


def tg_user(telegram_id, **fields):
    data = {"first_name": None, "last_name": None, "username": None, "photo_url": None, "language_code": None}
    data.update(fields)
    return SimpleNamespace(id=telegram_id, **data)


def test_protected_route_requires_init_data(raw_client):
    resp = raw_client.get("/api/users/me")

    assert resp.status_code == 401


def test_invalid_init_data_is_rejected(raw_client):
    resp = raw_client.get("/api/users/me", headers={"x-telegram-initdata": "query_id=1&hash=deadbeef"})

    assert resp.status_code == 401


def test_auth_endpoint_requires_init_data(raw_client):
    assert raw_client.post("/api/auth/telegram", json={}).status_code == 400


def test_auth_registers_then_syncs_profile(raw_client, db, fake_telegram):
    fake_telegram["tg-42"] = tg_user(42, first_name="Ann", last_name="Lee", language_code="ru-RU")

    resp = raw_client.post("/api/auth/telegram", json={"initData": "tg-42"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["telegram_id"] == 42
    assert body["name"] == "Ann Lee"
    assert body["language_code"] == "ru"

    fake_telegram["tg-42"] = tg_user(42, username="annlee", language_code="de")
    me = raw_client.get("/api/users/me", params={"init_data": "tg-42"})

    assert me.status_code == 200
    assert me.json()["name"] == "annlee"
    assert me.json()["language_code"] == "en"
    assert db.query(User).filter_by(telegram_id=42).count() == 1


def test_unregistered_user_is_not_created_by_dependency(raw_client, db, fake_telegram):
    fake_telegram["tg-7"] = tg_user(7, first_name="Zed")

    resp = raw_client.get("/api/users/me", headers={"x-telegram-initdata": "tg-7"})

    assert resp.status_code == 401
    assert db.query(User).count() == 0


def test_display_name_fallbacks():
    assert get_display_name(first_name="Ann", last_name="Lee") == "Ann Lee"
    assert get_display_name(first_name="Ann") == "Ann"
    assert get_display_name(username="ann") == "ann"
    assert get_display_name(telegram_id=123) == "123"
    assert get_display_name() == ""


def test_init_data_in_request_body_authenticates(raw_client, fake_telegram):
    fake_telegram["tg-5"] = tg_user(5, first_name="Bea")
    raw_client.post("/api/auth/telegram", json={"initData": "tg-5"})

    resp = raw_client.patch("/api/users/me", json={"initData": "tg-5", "phone": "+15559999"})

    assert resp.status_code == 200
    assert resp.json()["phone"] == "+15559999"
    assert resp.json()["name"] == "Bea"


def test_profile_sync_only_touches_telegram_fields(raw_client, db, fake_telegram):
    fake_telegram["tg-9"] = tg_user(9, first_name="Ivy")
    raw_client.post("/api/auth/telegram", json={"initData": "tg-9"})
    raw_client.patch("/api/users/me", json={"initData": "tg-9", "email": "ivy@example.com"})

    fake_telegram["tg-9"] = tg_user(9, first_name="Ivy", last_name="Green")
    me = raw_client.get("/api/users/me", headers={"x-telegram-initdata": "tg-9"}).json()

    assert me["name"] == "Ivy Green"
    assert me["email"] == "ivy@example.com"
