# splitledger/models/expense_split.py
# -----------------------------------------------------------------------------
# МОДЕЛЬ: ExpenseSplit (SQLAlchemy)
# -----------------------------------------------------------------------------

from __future__ import annotations

from sqlalchemy import (
    Column,
    Integer,
    ForeignKey,
    Numeric,
    UniqueConstraint,
    Index,
)
from sqlalchemy.orm import relationship

from splitledger.db import Base


class ExpenseSplit(Base):
    __tablename__ = "expense_splits"

    id = Column(Integer, primary_key=True, index=True)

    expense_id = Column(
        Integer,
        ForeignKey("expenses.id", ondelete="CASCADE"),
        nullable=False,
        comment="ID расхода",
    )

    user_id = Column(
        Integer,
        ForeignKey("users.id"),
        nullable=False,
        comment="ID участника группы",
    )

    amount = Column(
        Numeric(18, 6),
        nullable=False,
        comment="Доля участника в сумме расхода",
    )

    percentage = Column(
        Numeric(9, 6),
        nullable=True,
        comment="Доля участника в процентах (0..100)",
    )

    __table_args__ = (
        UniqueConstraint("expense_id", "user_id", name="uq_expense_splits_expense_user"),
        Index("ix_expense_splits_expense", "expense_id"),
        Index("ix_expense_splits_user", "user_id"),
    )

    expense = relationship("Expense", back_populates="splits")
    user = relationship("User", lazy="joined")
