# splitledger/services/group_membership.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from fastapi import HTTPException
from starlette import status
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from splitledger.models.group import Group
from splitledger.models.group_member import GroupMember

log = logging.getLogger(__name__)


def is_active_member(db: Session, group_id: int, user_id: int) -> bool:
    """
    Активный участник = запись в group_members с deleted_at IS NULL.
    """
    return (
        db.query(GroupMember)
        .filter(
            GroupMember.group_id == group_id,
            GroupMember.user_id == user_id,
            GroupMember.deleted_at.is_(None),
        )
        .first()
        is not None
    )


def add_member(db: Session, group_id: int, user_id: int, *, already_member_detail: str) -> GroupMember:
    """
    Добавляет участника в группу (или реактивирует soft-deleted запись).

    Исключения:
      HTTPException 404: группы не существует;
      HTTPException 409: пользователь уже активный участник.
    """
    grp: Optional[Group] = db.get(Group, group_id)
    if not grp:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Group not found")

    # Любая запись по (group_id, user_id): без фильтров по deleted_at
    row: Optional[GroupMember] = (
        db.query(GroupMember)
        .filter(GroupMember.group_id == group_id, GroupMember.user_id == user_id)
        .first()
    )

    if row and row.deleted_at is None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=already_member_detail)

    if row:
        row.deleted_at = None
        row.joined_at = datetime.utcnow()
        db.add(row)
        db.commit()
        db.refresh(row)
        log.info("member reactivated: group=%s user=%s", group_id, user_id)
        return row

    gm = GroupMember(group_id=group_id, user_id=user_id, joined_at=datetime.utcnow())
    db.add(gm)
    try:
        db.commit()
    except IntegrityError:
        # Гонка по UNIQUE (group_id, user_id): запись уже создана параллельным запросом
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=already_member_detail)

    db.refresh(gm)
    log.info("member added: group=%s user=%s", group_id, user_id)
    return gm


def deactivate_member(db: Session, member: GroupMember) -> None:
    """
    Soft-delete членства (deleted_at = now). Расходы/платежи остаются, но в балансах
    бывший участник больше не учитывается.
    """
    if member.deleted_at is not None:
        return
    member.deleted_at = datetime.utcnow()
    db.add(member)
    db.commit()
    log.info("member deactivated: group=%s user=%s", member.group_id, member.user_id)
