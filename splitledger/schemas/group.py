# splitledger/schemas/group.py
# -----------------------------------------------------------------------------
# СХЕМЫ Pydantic: Group
# -----------------------------------------------------------------------------

from __future__ import annotations

from typing import Optional, List
from datetime import datetime

from pydantic import BaseModel, Field, constr

from .group_member import GroupMemberOut
from .expense import ExpenseOut
from .payment import PaymentOut


class GroupCreate(BaseModel):
    name: constr(strip_whitespace=True, min_length=1, max_length=120) = Field(..., description="Название группы")
    description: Optional[constr(strip_whitespace=True, max_length=500)] = Field(
        default=None,
        description="Описание группы (необязательно)",
    )


class GroupOut(BaseModel):
    id: int = Field(..., description="ID группы")
    name: str = Field(..., description="Название группы")
    description: Optional[str] = Field(None, description="Описание группы")
    owner_id: int = Field(..., description="ID создателя группы")
    created_at: datetime

    class Config:
        from_attributes = True


class GroupDetailOut(GroupOut):
    members: List[GroupMemberOut] = Field(default_factory=list, description="Текущий состав группы")
    expenses: List[ExpenseOut] = Field(default_factory=list, description="Расходы, новые первыми")
    payments: List[PaymentOut] = Field(default_factory=list, description="Платежи, новые первыми")
