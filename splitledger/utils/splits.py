# splitledger/utils/splits.py
# -----------------------------------------------------------------------------
# ПОСТРОЕНИЕ И ВАЛИДАЦИЯ ДОЛЕЙ РАСХОДА (до записи в БД)
# -----------------------------------------------------------------------------
#   • equal     : поровну между ТЕКУЩИМИ участниками группы;
#   • amount    : суммы заданы явно, их сумма должна совпасть с amount (±0.01);
#   • percentage: проценты заданы явно, их сумма должна быть 100 (±0.01).
# Дубликаты user_id в custom-списке суммируются.
# -----------------------------------------------------------------------------

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Sequence

from fastapi import HTTPException
from starlette import status

from splitledger.utils.balance import (
    BALANCE_EPS,
    HUNDRED,
    SPLIT_AMOUNT,
    SPLIT_EQUAL,
    SPLIT_PERCENTAGE,
    _D,
    equal_split_amounts,
)

# В новых Starlette 422 называется HTTP_422_UNPROCESSABLE_CONTENT, старое имя устарело
HTTP_422 = getattr(status, "HTTP_422_UNPROCESSABLE_CONTENT", 422)


def _aggregate_custom(
    custom_splits: Iterable[Any],
    member_ids: Sequence[int],
    field: str,
) -> Dict[int, Decimal]:
    allowed = set(member_ids)
    aggregated: Dict[int, Decimal] = {}
    for split in custom_splits:
        uid = getattr(split, "user_id", None)
        if uid not in allowed:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"User {uid} is not a member of the group",
            )
        value = _D(getattr(split, field, None))
        if value < 0:
            raise HTTPException(
                status_code=HTTP_422,
                detail=f"Split {field} must not be negative",
            )
        aggregated[uid] = aggregated.get(uid, Decimal("0")) + value
    return aggregated


def build_expense_splits(
    split_type: Optional[str],
    amount,
    member_ids: Sequence[int],
    custom_splits: Optional[Iterable[Any]] = None,
) -> List[Dict[str, Any]]:
    """
    Возвращает готовые к записи доли [{"user_id", "amount", "percentage"}, ...].
    Ошибки валидации: HTTPException (422/400), текст уходит пользователю как есть.
    """
    total = _D(amount)
    if total <= 0:
        raise HTTPException(status_code=HTTP_422, detail="Amount must be positive")

    split_type = (split_type or SPLIT_EQUAL).lower().strip()

    if split_type == SPLIT_EQUAL:
        if not member_ids:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Group has no members")
        return equal_split_amounts(total, member_ids)

    custom = list(custom_splits or [])
    if not custom:
        raise HTTPException(
            status_code=HTTP_422,
            detail=f"Custom splits are required for split_type='{split_type}'",
        )

    if split_type == SPLIT_AMOUNT:
        per_user = _aggregate_custom(custom, member_ids, "amount")
        if abs(sum(per_user.values(), Decimal("0")) - total) > BALANCE_EPS:
            raise HTTPException(
                status_code=HTTP_422,
                detail="Custom splits must sum to the total amount",
            )
        return [
            {"user_id": uid, "amount": value, "percentage": value / total * HUNDRED}
            for uid, value in per_user.items()
        ]

    if split_type == SPLIT_PERCENTAGE:
        per_user = _aggregate_custom(custom, member_ids, "percentage")
        if abs(sum(per_user.values(), Decimal("0")) - HUNDRED) > BALANCE_EPS:
            raise HTTPException(
                status_code=HTTP_422,
                detail="Percentages must sum to 100%",
            )
        return [
            {"user_id": uid, "amount": total * pct / HUNDRED, "percentage": pct}
            for uid, pct in per_user.items()
        ]

    raise HTTPException(
        status_code=HTTP_422,
        detail="split_type must be 'equal', 'amount' or 'percentage'",
    )
