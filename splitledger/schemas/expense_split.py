# splitledger/schemas/expense_split.py
# -----------------------------------------------------------------------------
# СХЕМЫ Pydantic: ExpenseSplit (доли участников)
# -----------------------------------------------------------------------------
# Сверка суммы долей с amount / процентов со 100: на уровне utils/splits.py.
# -----------------------------------------------------------------------------

from __future__ import annotations

from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field

from .user import MemberOut


class ExpenseSplitIn(BaseModel):
    user_id: int = Field(..., description="ID участника группы")
    # для split_type='amount'
    amount: Optional[Decimal] = Field(default=None, description="Сумма доли участника")
    # для split_type='percentage'
    percentage: Optional[Decimal] = Field(default=None, description="Доля участника в процентах")


class ExpenseSplitOut(BaseModel):
    id: int
    user_id: int
    amount: float
    percentage: Optional[float] = None
    user: Optional[MemberOut] = None

    class Config:
        from_attributes = True
