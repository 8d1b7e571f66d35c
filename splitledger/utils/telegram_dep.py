# splitledger/utils/telegram_dep.py
"""
Авторизация через Telegram WebApp initData.

Цепочка: запрос -> строка initData -> проверка подписи -> профиль Telegram ->
пользователь SplitLedger (найден по telegram_id, поля профиля синхронизированы).

- validate_and_sync_user: проверка initData и синхронизация пользователя
- get_current_telegram_user: FastAPI-зависимость для защищённых ручек (не регистрирует)
"""

import logging
import os
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session
from starlette import status

from splitledger.db import get_db
from splitledger.models.user import User
from splitledger.utils.user import get_display_name
from telegram_webapp_auth.auth import TelegramAuthenticator, generate_secret_key

load_dotenv()
log = logging.getLogger(__name__)

TELEGRAM_BOT_TOKEN = os.environ.get("TELEGRAM_BOT_TOKEN")
if not TELEGRAM_BOT_TOKEN:
    raise RuntimeError("TELEGRAM_BOT_TOKEN is not set")

authenticator = TelegramAuthenticator(generate_secret_key(TELEGRAM_BOT_TOKEN))

# Где ищем initData (в этом порядке): JSON body, заголовок, query
INIT_DATA_BODY_KEY = "initData"
INIT_DATA_HEADER = "x-telegram-initdata"
INIT_DATA_QUERY = "init_data"

SUPPORTED_LANGUAGES = ("ru", "en", "es")
DEFAULT_LANGUAGE = "en"


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


# ===== Профиль Telegram -> поля User =========================================

def _language_of(code: Optional[str]) -> str:
    """'ru-RU' -> 'ru'; неизвестный или пустой код -> 'en'."""
    base = (code or "").lower().split("-")[0]
    return base if base in SUPPORTED_LANGUAGES else DEFAULT_LANGUAGE


def _telegram_profile(tg_user: Any, telegram_id: int) -> Dict[str, Any]:
    """
    Поля User, которые берутся из Telegram. email/phone сюда не входят:
    их пользователь задаёт сам через PATCH /api/users/me.
    """
    first_name = getattr(tg_user, "first_name", None)
    last_name = getattr(tg_user, "last_name", None)
    username = getattr(tg_user, "username", None)
    return {
        "first_name": first_name,
        "last_name": last_name,
        "username": username,
        "photo_url": getattr(tg_user, "photo_url", None),
        "language_code": _language_of(getattr(tg_user, "language_code", None)),
        "name": get_display_name(
            first_name=first_name, last_name=last_name, username=username, telegram_id=telegram_id,
        ),
    }


def _sync_profile(user: User, profile: Dict[str, Any]) -> bool:
    """Записывает отличающиеся поля; True, если что-то поменялось."""
    stale = {field: value for field, value in profile.items() if getattr(user, field) != value}
    for field, value in stale.items():
        setattr(user, field, value)
    return bool(stale)


# ===== Проверка initData и пользователь =======================================

def _verified_telegram_user(init_data: str) -> Any:
    if not init_data:
        raise _unauthorized("Not authenticated")
    try:
        result = authenticator.validate(init_data)
    except Exception as e:
        raise _unauthorized(f"Auth error: {e}")
    if result.user is None:
        raise _unauthorized("initData has no user")
    return result.user


def validate_and_sync_user(init_data: str, db: Session, *, create_if_missing: bool) -> User:
    """
    Проверяет initData и возвращает пользователя SplitLedger.
    create_if_missing=True только для /api/auth/telegram: там происходит регистрация.
    """
    tg_user = _verified_telegram_user(init_data)
    telegram_id = tg_user.id
    profile = _telegram_profile(tg_user, telegram_id)

    user: Optional[User] = db.query(User).filter(User.telegram_id == telegram_id).first()
    if user is None:
        if not create_if_missing:
            raise _unauthorized("User is not registered")
        user = User(telegram_id=telegram_id, **profile)
        db.add(user)
        db.commit()
        db.refresh(user)
        log.info("user registered: id=%s telegram_id=%s", user.id, telegram_id)
        return user

    if _sync_profile(user, profile):
        db.commit()
        db.refresh(user)
    return user


# ===== FastAPI-зависимость =====================================================

async def _read_init_data(request: Request) -> str:
    if request.method in {"POST", "PUT", "PATCH"}:
        try:
            body = await request.json()
        except Exception:
            body = None
        value = body.get(INIT_DATA_BODY_KEY) if isinstance(body, dict) else None
        if isinstance(value, str) and value.strip():
            return value

    init_data = request.headers.get(INIT_DATA_HEADER) or request.query_params.get(INIT_DATA_QUERY)
    if not init_data:
        raise _unauthorized(
            f"Not authenticated: initData required (JSON '{INIT_DATA_BODY_KEY}', "
            f"header '{INIT_DATA_HEADER}' or '?{INIT_DATA_QUERY}=...')"
        )
    return init_data


async def get_current_telegram_user(request: Request, db: Session = Depends(get_db)) -> User:
    """initData -> проверка -> уже зарегистрированный пользователь."""
    return validate_and_sync_user(await _read_init_data(request), db, create_if_missing=False)
