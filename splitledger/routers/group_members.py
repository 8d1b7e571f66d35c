# splitledger/routers/group_members.py
# РОУТЕР УЧАСТНИКОВ ГРУППЫ
# -----------------------------------------------------------------------------
# Добавление (по id / email / телефону / имени), состав, выход, удаление.
# Выход и удаление: soft-delete и только при нулевом балансе участника.

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from starlette import status
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from splitledger.db import get_db
from splitledger.models.group_member import GroupMember
from splitledger.models.user import User
from splitledger.schemas.group_member import (
    GroupMemberCreate,
    GroupMemberByEmail,
    GroupMemberByPhone,
    GroupMemberByName,
    GroupMemberOut,
)
from splitledger.services.group_membership import add_member, deactivate_member
from splitledger.utils.telegram_dep import get_current_telegram_user
from splitledger.utils.groups import require_membership, require_owner, ensure_member_settled
from splitledger.utils.user import normalize_email, normalize_phone

router = APIRouter()

ALREADY_MEMBER = "User is already a member of this group"


def _add_existing_user(db: Session, group_id: int, user: Optional[User], not_found_detail: str) -> GroupMember:
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=not_found_detail)
    return add_member(db, group_id, user.id, already_member_detail=ALREADY_MEMBER)


@router.post("/", response_model=GroupMemberOut, status_code=status.HTTP_201_CREATED)
def add_group_member(
    member: GroupMemberCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_telegram_user),
):
    """
    Добавить участника по ID (например, из результатов /api/users/search).
    Доступ есть у любого участника группы.
    """
    require_membership(db, member.group_id, current_user.id)
    user = db.get(User, member.user_id)
    return _add_existing_user(db, member.group_id, user, "User not found")


@router.post("/by-email", response_model=GroupMemberOut, status_code=status.HTTP_201_CREATED)
def add_group_member_by_email(
    payload: GroupMemberByEmail,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_telegram_user),
):
    require_membership(db, payload.group_id, current_user.id)
    user = db.query(User).filter(User.email == normalize_email(payload.email)).first()
    return _add_existing_user(
        db, payload.group_id, user,
        "User with this email not found. They may need to sign up first.",
    )


@router.post("/by-phone", response_model=GroupMemberOut, status_code=status.HTTP_201_CREATED)
def add_group_member_by_phone(
    payload: GroupMemberByPhone,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_telegram_user),
):
    require_membership(db, payload.group_id, current_user.id)
    user = db.query(User).filter(User.phone == normalize_phone(payload.phone)).first()
    return _add_existing_user(
        db, payload.group_id, user,
        "User with this phone number not found. They may need to sign up first.",
    )


@router.post("/by-name", response_model=GroupMemberOut, status_code=status.HTTP_201_CREATED)
def add_group_member_by_name(
    payload: GroupMemberByName,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_telegram_user),
):
    """
    Поиск по точному имени без учёта регистра; при нескольких совпадениях берём первого.
    """
    require_membership(db, payload.group_id, current_user.id)
    user = (
        db.query(User)
        .filter(func.lower(func.trim(User.name)) == payload.name.lower())
        .order_by(User.id.asc())
        .first()
    )
    return _add_existing_user(
        db, payload.group_id, user,
        "User with this name not found. Try searching by email instead.",
    )


@router.get("/group/{group_id}", response_model=List[GroupMemberOut])
def get_members_for_group(
    group_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_telegram_user),
):
    """
    Состав группы виден только участникам. Отдаём только активные записи.
    """
    require_membership(db, group_id, current_user.id)
    return (
        db.query(GroupMember)
        .options(joinedload(GroupMember.user))
        .filter(GroupMember.group_id == group_id, GroupMember.deleted_at.is_(None))
        .order_by(GroupMember.joined_at.asc(), GroupMember.id.asc())
        .all()
    )


@router.post("/group/{group_id}/leave", status_code=status.HTTP_204_NO_CONTENT)
def leave_group(
    group_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_telegram_user),
):
    """
    Самовыход участника:
      • владелец не может выйти;
      • разрешено ТОЛЬКО при нулевом балансе (|net| <= 0.01).
    """
    group = require_membership(db, group_id, current_user.id)
    if group.owner_id == current_user.id:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Owner cannot leave the group")

    ensure_member_settled(
        db, group_id, current_user.id,
        detail="You cannot leave the group while you still have unsettled balance.",
    )

    member = db.query(GroupMember).filter(
        GroupMember.group_id == group_id,
        GroupMember.user_id == current_user.id,
        GroupMember.deleted_at.is_(None),
    ).first()
    deactivate_member(db, member)


@router.delete("/{member_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_group_member(
    member_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_telegram_user),
):
    """
    Удаление участника:
      • только владелец группы;
      • нельзя удалить владельца;
      • разрешено ТОЛЬКО при нулевом балансе участника.
    """
    member = db.get(GroupMember, member_id)
    if not member or member.deleted_at is not None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Group member not found")

    group = require_owner(db, member.group_id, current_user.id)
    if member.user_id == group.owner_id:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Cannot remove the group owner")

    ensure_member_settled(
        db, group.id, member.user_id,
        detail="Member has unsettled balance and cannot be removed.",
    )
    deactivate_member(db, member)
