# splitledger/routers/users.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from starlette import status
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from splitledger.db import get_db
from splitledger.models.user import User
from splitledger.schemas.user import MemberOut, UserContactsUpdate, UserOut
from splitledger.utils.telegram_dep import get_current_telegram_user
from splitledger.utils.user import normalize_phone

router = APIRouter()

SEARCH_MIN_LENGTH = 2
SEARCH_LIMIT = 10


@router.get("/me", response_model=UserOut)
def get_me(current_user: User = Depends(get_current_telegram_user)):
    return current_user


@router.patch("/me", response_model=UserOut)
def update_my_contacts(
    payload: UserContactsUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_telegram_user),
):
    """
    Email / телефон, по которым другие участники смогут найти пользователя.
    Передано null или "": поле очищается; не передано: не меняется.
    """
    fields_set = payload.model_fields_set

    if "email" in fields_set:
        email = payload.email
        if email and db.query(User.id).filter(User.email == email, User.id != current_user.id).first():
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email is already in use")
        current_user.email = email

    if "phone" in fields_set:
        phone = normalize_phone(payload.phone)
        if phone and db.query(User.id).filter(User.phone == phone, User.id != current_user.id).first():
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Phone is already in use")
        current_user.phone = phone

    db.add(current_user)
    db.commit()
    db.refresh(current_user)
    return current_user


@router.get("/search", response_model=List[MemberOut])
def search_users(
    q: str = Query("", description="Часть имени, email или телефона"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_telegram_user),
):
    """
    Поиск пользователей для добавления в группу.
    Меньше 2 символов: пустой список; не больше 10 результатов.
    """
    term = (q or "").strip().lower()
    if len(term) < SEARCH_MIN_LENGTH:
        return []

    like = f"%{term}%"
    return (
        db.query(User)
        .filter(
            or_(
                func.lower(User.name).like(like),
                func.lower(User.email).like(like),
                User.phone.like(like),
            )
        )
        .order_by(User.id.asc())
        .limit(SEARCH_LIMIT)
        .all()
    )
