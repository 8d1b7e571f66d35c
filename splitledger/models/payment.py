# splitledger/models/payment.py
# -----------------------------------------------------------------------------
# МОДЕЛЬ: Payment (SQLAlchemy): прямой перевод денег между участниками
# -----------------------------------------------------------------------------

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, DateTime, Index, CheckConstraint
from sqlalchemy.orm import relationship

from splitledger.db import Base


class Payment(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)

    group_id = Column(Integer, ForeignKey("groups.id"), nullable=False)

    from_user_id = Column(
        Integer,
        ForeignKey("users.id"),
        nullable=False,
        comment="Кто отдал деньги",
    )

    to_user_id = Column(
        Integer,
        ForeignKey("users.id"),
        nullable=False,
        comment="Кто получил деньги",
    )

    amount = Column(Numeric(18, 6), nullable=False, comment="Сумма перевода (> 0)")
    description = Column(String, nullable=True)
    date = Column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        Index("ix_payments_group_date", "group_id", "date"),
        Index("ix_payments_from_user", "from_user_id"),
        Index("ix_payments_to_user", "to_user_id"),
        CheckConstraint("amount > 0", name="ck_payments_amount_positive"),
        CheckConstraint("from_user_id <> to_user_id", name="ck_payments_not_self"),
    )

    from_user = relationship("User", foreign_keys=[from_user_id], lazy="joined")
    to_user = relationship("User", foreign_keys=[to_user_id], lazy="joined")
