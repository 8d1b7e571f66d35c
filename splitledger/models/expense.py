# splitledger/models/expense.py
# -----------------------------------------------------------------------------
# МОДЕЛЬ: Expense (SQLAlchemy)
# -----------------------------------------------------------------------------

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    Numeric,
    DateTime,
    Index,
    CheckConstraint,
)
from sqlalchemy.orm import relationship

from splitledger.db import Base


class Expense(Base):
    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True, index=True)

    group_id = Column(
        Integer,
        ForeignKey("groups.id"),
        nullable=False,
        comment="ID группы, к которой относится расход",
    )

    description = Column(
        String,
        nullable=False,
        comment="Описание расхода",
    )

    amount = Column(
        Numeric(18, 6),
        nullable=False,
        comment="Сумма расхода (> 0)",
    )

    paid_by = Column(
        Integer,
        ForeignKey("users.id"),
        nullable=False,
        comment="Кто оплатил",
    )

    split_type = Column(
        String,
        nullable=True,
        comment="Тип деления ('equal', 'amount', 'percentage'); NULL у старых записей",
    )

    date = Column(
        DateTime,
        nullable=False,
        default=datetime.utcnow,
        comment="Дата расхода",
    )

    created_by = Column(
        Integer,
        ForeignKey("users.id"),
        nullable=False,
        comment="Пользователь, создавший расход",
    )

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index("ix_expenses_group_date", "group_id", "date"),
        CheckConstraint("amount > 0", name="ck_expenses_amount_positive"),
    )

    group = relationship("Group", backref="expenses")
    payer = relationship("User", foreign_keys=[paid_by], lazy="joined")
    author = relationship("User", foreign_keys=[created_by])

    # Пустой список долей = legacy-расход (делится поровну на лету)
    splits = relationship(
        "ExpenseSplit",
        back_populates="expense",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
