# splitledger/schemas/payment.py

from __future__ import annotations

from decimal import Decimal
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from .user import MemberOut


class PaymentCreate(BaseModel):
    group_id: int
    to_user_id: int = Field(..., description="Кому переводим (участник группы)")
    amount: Decimal
    description: Optional[str] = None


class PaymentOut(BaseModel):
    id: int
    group_id: int
    from_user_id: int
    to_user_id: int
    amount: float
    description: Optional[str] = None
    date: datetime
    from_user: Optional[MemberOut] = None
    to_user: Optional[MemberOut] = None

    class Config:
        from_attributes = True
