# splitledger/schemas/expense.py
# -----------------------------------------------------------------------------
# СХЕМЫ Pydantic: Expense
# -----------------------------------------------------------------------------

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional, Literal
from datetime import datetime
from pydantic import BaseModel, Field, validator, constr

from .expense_split import ExpenseSplitIn, ExpenseSplitOut
from .user import MemberOut

SplitType = Literal["equal", "amount", "percentage"]


class ExpenseBase(BaseModel):
    description: constr(strip_whitespace=True, min_length=1)
    # положительность проверяем в сервисном слое, чтобы отдать понятный текст ошибки
    amount: Decimal
    split_type: Optional[SplitType] = None
    paid_by: Optional[int] = Field(default=None, description="Кто оплатил; по умолчанию: текущий пользователь")
    splits: Optional[List[ExpenseSplitIn]] = None

    @validator("splits", always=True)
    def _require_splits_when_needed(cls, splits: Optional[List[ExpenseSplitIn]], values):
        """
        Для split_type='amount'/'percentage' список долей обязателен.
        Проверку сумм выполняем в utils/splits.py.
        """
        split_type = values.get("split_type")
        if split_type in ("amount", "percentage") and not splits:
            raise ValueError(f"splits are required for split_type='{split_type}'")
        return splits


class ExpenseCreate(ExpenseBase):
    group_id: int
    date: Optional[datetime] = None


class ExpenseUpdate(ExpenseBase):
    """
    Обновление расхода: доли всегда пересобираются целиком (старые удаляются).
    """
    split_type: SplitType = "equal"


class ExpenseOut(BaseModel):
    id: int
    group_id: int
    description: str
    amount: float
    paid_by: int
    split_type: Optional[SplitType] = None
    date: datetime
    created_by: int
    payer: Optional[MemberOut] = None
    splits: List[ExpenseSplitOut] = Field(default_factory=list)

    class Config:
        from_attributes = True
