# splitledger/routers/expenses.py
# -----------------------------------------------------------------------------
# РОУТЕР: Расходы (создание / правка / удаление + доли участников)
# -----------------------------------------------------------------------------
# Доли строятся и проверяются в utils/splits.py ДО записи в БД, поэтому
# расчёт балансов всегда получает согласованные данные.
# При правке доли удаляются и создаются заново в одном commit.
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from starlette import status
from sqlalchemy.orm import Session

from splitledger.db import get_db
from splitledger.models.expense import Expense
from splitledger.models.expense_split import ExpenseSplit
from splitledger.models.user import User
from splitledger.schemas.expense import ExpenseCreate, ExpenseUpdate, ExpenseOut
from splitledger.utils.splits import build_expense_splits
from splitledger.utils.telegram_dep import get_current_telegram_user
from splitledger.utils.groups import require_membership, get_group_member_ids

log = logging.getLogger(__name__)

router = APIRouter()


# ===== Вспомогательные =======================================================

def _get_expense_or_404(db: Session, expense_id: int) -> Expense:
    expense = db.get(Expense, expense_id)
    if not expense:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Expense not found")
    return expense


def _resolve_payer(paid_by, current_user: User, member_ids: List[int]) -> int:
    payer_id = paid_by if paid_by is not None else current_user.id
    if payer_id not in member_ids:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="paid_by must be a member of the group")
    return payer_id


def _split_rows(expense_id: int, splits: List[Dict[str, Any]]) -> List[ExpenseSplit]:
    return [
        ExpenseSplit(
            expense_id=expense_id,
            user_id=s["user_id"],
            amount=s["amount"],
            percentage=s["percentage"],
        )
        for s in splits
    ]


# ===== Эндпоинты ==============================================================

@router.get("/", response_model=List[ExpenseOut])
def get_expenses(
    group_id: int = Query(..., description="ID группы"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_telegram_user),
):
    require_membership(db, group_id, current_user.id)
    return (
        db.query(Expense)
        .filter(Expense.group_id == group_id)
        .order_by(Expense.date.desc(), Expense.id.desc())
        .all()
    )


@router.get("/{expense_id}", response_model=ExpenseOut)
def get_expense(
    expense_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_telegram_user),
):
    expense = _get_expense_or_404(db, expense_id)
    require_membership(db, expense.group_id, current_user.id)
    return expense


@router.post("/", response_model=ExpenseOut, status_code=status.HTTP_201_CREATED)
def create_expense(
    payload: ExpenseCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_telegram_user),
):
    require_membership(db, payload.group_id, current_user.id)

    member_ids = get_group_member_ids(db, payload.group_id)
    payer_id = _resolve_payer(payload.paid_by, current_user, member_ids)
    split_type = payload.split_type or "equal"
    splits = build_expense_splits(split_type, payload.amount, member_ids, payload.splits)

    expense = Expense(
        group_id=payload.group_id,
        description=payload.description,
        amount=payload.amount,
        paid_by=payer_id,
        split_type=split_type,
        date=payload.date or datetime.utcnow(),
        created_by=current_user.id,
    )
    db.add(expense)
    db.flush()  # получим expense.id

    db.add_all(_split_rows(expense.id, splits))
    db.commit()
    db.refresh(expense)

    log.info(
        "expense created: id=%s group=%s amount=%s split_type=%s splits=%d",
        expense.id, expense.group_id, payload.amount, split_type, len(splits),
    )
    return expense


@router.put("/{expense_id}", response_model=ExpenseOut)
def update_expense(
    expense_id: int,
    patch: ExpenseUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_telegram_user),
):
    expense = _get_expense_or_404(db, expense_id)
    require_membership(db, expense.group_id, current_user.id)

    member_ids = get_group_member_ids(db, expense.group_id)
    payer_id = expense.paid_by if patch.paid_by is None else _resolve_payer(patch.paid_by, current_user, member_ids)
    splits = build_expense_splits(patch.split_type, patch.amount, member_ids, patch.splits)

    expense.description = patch.description
    expense.amount = patch.amount
    expense.split_type = patch.split_type
    expense.paid_by = payer_id

    # Доли заменяем целиком (включая legacy-расход: после правки у него появятся строки).
    # Старые строки удаляем отдельным flush: иначе INSERT новых упрётся в UNIQUE (expense_id, user_id).
    expense.splits.clear()
    db.flush()
    expense.splits.extend(_split_rows(expense.id, splits))
    db.commit()
    db.refresh(expense)

    log.info("expense updated: id=%s amount=%s split_type=%s", expense.id, patch.amount, patch.split_type)
    return expense


@router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_expense(
    expense_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_telegram_user),
):
    """
    Удаление расхода вместе с долями (без истории).
    """
    expense = _get_expense_or_404(db, expense_id)
    group_id = expense.group_id
    require_membership(db, group_id, current_user.id)

    # доли удалятся каскадом (cascade="all, delete-orphan")
    db.delete(expense)
    db.commit()

    log.info("expense deleted: id=%s group=%s", expense_id, group_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
