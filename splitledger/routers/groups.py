# splitledger/routers/groups.py
# -----------------------------------------------------------------------------
# РОУТЕР: Группы (+ балансы и settle-up)
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List

from fastapi import APIRouter, Depends
from starlette import status
from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from splitledger.db import get_db
from splitledger.models.group import Group
from splitledger.models.group_member import GroupMember
from splitledger.models.user import User
from splitledger.models.expense import Expense
from splitledger.models.payment import Payment
from splitledger.schemas.group import GroupCreate, GroupOut, GroupDetailOut
from splitledger.schemas.group_member import GroupMemberOut
from splitledger.schemas.balance import BalanceOut
from splitledger.schemas.settlement import SettlementOut
from splitledger.services.group_membership import add_member
from splitledger.utils.telegram_dep import get_current_telegram_user
from splitledger.utils.groups import (
    get_group_or_404,
    require_membership,
    group_balances,
    group_settlements,
)

log = logging.getLogger(__name__)

router = APIRouter()


def _money(value) -> float:
    return round(float(value), 2)


# ===== Балансы / Settle-up ====================================================

@router.get("/{group_id}/balances", response_model=List[BalanceOut])
def get_group_balances(
    group_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_telegram_user),
):
    """
    Баланс каждого текущего участника группы.
    Считается заново на каждый запрос из расходов, долей и платежей.
    """
    require_membership(db, group_id, current_user.id)

    return [
        {
            "user": bal["user"],
            "total_paid": _money(bal["total_paid"]),
            "total_owed": _money(bal["total_owed"]),
            "total_received": _money(bal["total_received"]),
            "net_balance": _money(bal["net_balance"]),
        }
        for bal in group_balances(db, group_id)
    ]


@router.get("/{group_id}/settle-up", response_model=List[SettlementOut])
def get_settlement_suggestions(
    group_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_telegram_user),
):
    """
    План взаиморасчётов: кто, кому и сколько должен перевести, чтобы обнулить балансы.
    Только рекомендация: платежи не создаются.
    """
    require_membership(db, group_id, current_user.id)

    return [
        {"from_user": s["from_user"], "to_user": s["to_user"], "amount": _money(s["amount"])}
        for s in group_settlements(db, group_id)
    ]


# ===== Создание и списки ======================================================

@router.post("/", response_model=GroupOut, status_code=status.HTTP_201_CREATED)
def create_group(
    group: GroupCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_telegram_user),
):
    db_group = Group(
        name=group.name,
        description=group.description or None,
        owner_id=current_user.id,
    )
    db.add(db_group)
    db.flush()

    # создатель становится первым участником группы
    db.add(GroupMember(group_id=db_group.id, user_id=current_user.id, joined_at=datetime.utcnow()))
    db.commit()
    db.refresh(db_group)

    log.info("group created: id=%s owner=%s", db_group.id, current_user.id)
    return db_group


@router.get("/", response_model=List[GroupOut])
def get_my_groups(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_telegram_user),
):
    """
    Группы, где текущий пользователь состоит активным участником.
    """
    stmt = (
        select(Group)
        .join(GroupMember, GroupMember.group_id == Group.id)
        .where(GroupMember.user_id == current_user.id, GroupMember.deleted_at.is_(None))
        .order_by(Group.id.desc())
    )
    return db.execute(stmt).scalars().all()


@router.get("/available", response_model=List[GroupOut])
def get_available_groups(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_telegram_user),
):
    """
    Группы, куда можно вступить через POST /{group_id}/join:
    текущий пользователь в них не состоит (или вышел).
    """
    my_active = (
        select(GroupMember.group_id)
        .where(GroupMember.user_id == current_user.id, GroupMember.deleted_at.is_(None))
    )
    stmt = (
        select(Group)
        .where(Group.id.not_in(my_active))
        .order_by(Group.id.desc())
    )
    return db.execute(stmt).scalars().all()


# ===== Детали группы ==========================================================

@router.get("/{group_id}", response_model=GroupDetailOut)
def group_detail(
    group_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_telegram_user),
):
    group = require_membership(db, group_id, current_user.id)

    members = (
        db.query(GroupMember)
        .options(joinedload(GroupMember.user))
        .filter(GroupMember.group_id == group_id, GroupMember.deleted_at.is_(None))
        .order_by(GroupMember.joined_at.asc(), GroupMember.id.asc())
        .all()
    )
    expenses = (
        db.query(Expense)
        .filter(Expense.group_id == group_id)
        .order_by(Expense.date.desc(), Expense.id.desc())
        .all()
    )
    payments = (
        db.query(Payment)
        .filter(Payment.group_id == group_id)
        .order_by(Payment.date.desc(), Payment.id.desc())
        .all()
    )

    payload: Dict[str, Any] = GroupOut.model_validate(group).model_dump()
    payload["members"] = members
    payload["expenses"] = expenses
    payload["payments"] = payments
    return payload


# ===== Вступление =============================================================

@router.post("/{group_id}/join", response_model=GroupMemberOut, status_code=status.HTTP_201_CREATED)
def join_group(
    group_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_telegram_user),
):
    get_group_or_404(db, group_id)
    return add_member(db, group_id, current_user.id, already_member_detail="Already a member of this group")
