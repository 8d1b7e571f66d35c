# splitledger/utils/groups.py
# ОБЩИЕ ХЕЛПЕРЫ ДЛЯ РАБОТЫ С ГРУППАМИ: гарды доступа, загрузка снапшота, балансы.

from __future__ import annotations

from decimal import Decimal
from typing import Dict, List, Any

from fastapi import HTTPException
from starlette import status
from sqlalchemy import select, func
from sqlalchemy.orm import Session

from ..models.group import Group
from ..models.group_member import GroupMember
from ..models.user import User
from ..models.expense import Expense
from ..models.expense_split import ExpenseSplit
from ..models.payment import Payment
from .balance import BALANCE_EPS, compute_balances, suggest_settlements

# =========================
# БАЗОВЫЕ ГАРДЫ / ЗАГРУЗКИ
# =========================

def get_group_or_404(db: Session, group_id: int) -> Group:
    group = db.get(Group, group_id)
    if not group:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Group not found")
    return group


def require_membership(db: Session, group_id: int, user_id: int) -> Group:
    """
    Проверяет активное членство (deleted_at IS NULL).
    """
    group = get_group_or_404(db, group_id)
    is_member = db.scalar(
        select(func.count())
        .select_from(GroupMember)
        .where(
            GroupMember.group_id == group_id,
            GroupMember.user_id == user_id,
            GroupMember.deleted_at.is_(None),
        )
    )
    if not is_member:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not a member of this group")
    return group


def require_owner(db: Session, group_id: int, user_id: int) -> Group:
    group = require_membership(db, group_id, user_id)
    if group.owner_id != user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only owner can perform this action")
    return group


# =========================
# ЧЛЕНЫ ГРУППЫ
# =========================

def get_group_members(db: Session, group_id: int) -> List[User]:
    """
    Текущие участники (deleted_at IS NULL) в порядке вступления.
    Единственное место, где определяется «текущий состав» группы.
    """
    stmt = (
        select(User)
        .join(GroupMember, GroupMember.user_id == User.id)
        .where(GroupMember.group_id == group_id, GroupMember.deleted_at.is_(None))
        .order_by(GroupMember.joined_at.asc(), GroupMember.id.asc())
    )
    return list(db.execute(stmt).scalars().all())


def get_group_member_ids(db: Session, group_id: int) -> List[int]:
    return [user.id for user in get_group_members(db, group_id)]


# =========================
# СНАПШОТ ГРУППЫ
# =========================

def load_group_expenses(db: Session, group_id: int) -> List[Expense]:
    stmt = (
        select(Expense)
        .where(Expense.group_id == group_id)
        .order_by(Expense.date.asc(), Expense.id.asc())
    )
    return list(db.execute(stmt).unique().scalars().all())


def load_splits_by_expense(db: Session, expense_ids: List[int]) -> Dict[int, List[ExpenseSplit]]:
    """
    {expense_id: [ExpenseSplit, ...]}; расходов без строк в словаре нет (legacy).
    """
    if not expense_ids:
        return {}
    rows = db.execute(
        select(ExpenseSplit).where(ExpenseSplit.expense_id.in_(expense_ids))
    ).unique().scalars().all()
    out: Dict[int, List[ExpenseSplit]] = {}
    for split in rows:
        out.setdefault(split.expense_id, []).append(split)
    return out


def load_group_payments(db: Session, group_id: int) -> List[Payment]:
    stmt = (
        select(Payment)
        .where(Payment.group_id == group_id)
        .order_by(Payment.date.asc(), Payment.id.asc())
    )
    return list(db.execute(stmt).unique().scalars().all())


# =========================
# БАЛАНСЫ / SETTLE-UP
# =========================

def group_balances(db: Session, group_id: int) -> List[Dict[str, Any]]:
    """
    Собирает снапшот группы и считает балансы. Ничего не кэшируем.
    """
    members = get_group_members(db, group_id)
    expenses = load_group_expenses(db, group_id)
    splits_by_expense = load_splits_by_expense(db, [e.id for e in expenses])
    payments = load_group_payments(db, group_id)
    return compute_balances(members, expenses, splits_by_expense, payments)


def group_settlements(db: Session, group_id: int) -> List[Dict[str, Any]]:
    return suggest_settlements(group_balances(db, group_id))


def member_net_balance(db: Session, group_id: int, user_id: int) -> Decimal:
    for bal in group_balances(db, group_id):
        if bal["user"].id == user_id:
            return bal["net_balance"]
    return Decimal("0")


def ensure_member_settled(db: Session, group_id: int, user_id: int, *, detail: str) -> None:
    """
    409, если |net| участника больше допуска.
    """
    net = member_net_balance(db, group_id, user_id)
    if net.copy_abs() > BALANCE_EPS:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"code": "member_has_nonzero_balance", "message": detail, "balance": round(float(net), 2)},
        )
