# splitledger/db.py
# Инициализация SQLAlchemy: движок, сессии, Base и явные импорты моделей.

from __future__ import annotations

import os
from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

load_dotenv()
DATABASE_URL = os.getenv("DATABASE_URL") or "sqlite:///./splitledger.db"


def _make_engine(url: str):
    if url.startswith("sqlite"):
        # in-memory база должна жить в одном соединении на весь процесс
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)
    return create_engine(
        url,
        pool_size=20,
        max_overflow=20,
        pool_timeout=60,
        pool_recycle=1800,
        pool_pre_ping=True,
    )


engine = _make_engine(DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

from splitledger.models import (  # noqa: E402,F401
    user,
    group,
    group_member,
    expense,
    expense_split,
    payment,
)

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
