import os

# до импорта приложения: БД в памяти и фиктивный токен бота
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("TELEGRAM_BOT_TOKEN", "123456:TEST-TOKEN")

from typing import Optional

import pytest
from fastapi import Depends, Header, HTTPException
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from splitledger.db import Base, SessionLocal, engine, get_db
from splitledger.main import app
from splitledger.models.user import User
from splitledger.utils.telegram_dep import get_current_telegram_user


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


def _override_current_user(
    x_user_id: Optional[int] = Header(default=None),
    db: Session = Depends(get_db),
) -> User:
    user = db.get(User, x_user_id) if x_user_id is not None else None
    if user is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user


@pytest.fixture
def raw_client(db):
    """Клиент с настоящей Telegram-авторизацией (подменена только БД)."""
    app.dependency_overrides[get_db] = lambda: db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def client(db):
    """Клиент, где текущий пользователь задаётся заголовком X-User-Id."""
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_current_telegram_user] = _override_current_user
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(name: str, email: Optional[str] = None, phone: Optional[str] = None) -> User:
        counter["n"] += 1
        user = User(telegram_id=1000 + counter["n"], name=name, first_name=name, email=email, phone=phone)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def alice(make_user):
    return make_user("Alice", email="alice@example.com", phone="+15550001")


@pytest.fixture
def bob(make_user):
    return make_user("Bob", email="bob@example.com", phone="+15550002")


@pytest.fixture
def carol(make_user):
    return make_user("Carol", email="carol@example.com", phone="+15550003")


def as_user(user: User) -> dict:
    return {"X-User-Id": str(user.id)}


@pytest.fixture
def make_group(client):
    """Создаёт группу от имени owner и добавляет остальных участников."""

    def _make(owner: User, *members: User, name: str = "Trip") -> int:
        resp = client.post("/api/groups/", json={"name": name}, headers=as_user(owner))
        assert resp.status_code == 201, resp.text
        group_id = resp.json()["id"]
        for m in members:
            r = client.post(
                "/api/group-members/",
                json={"group_id": group_id, "user_id": m.id},
                headers=as_user(owner),
            )
            assert r.status_code == 201, r.text
        return group_id

    return _make
