# splitledger/routers/payments.py
# -----------------------------------------------------------------------------
# РОУТЕР: Платежи (прямые переводы между участниками, «погашение» долга)
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging
from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from starlette import status
from sqlalchemy.orm import Session

from splitledger.db import get_db
from splitledger.models.payment import Payment
from splitledger.models.user import User
from splitledger.schemas.payment import PaymentCreate, PaymentOut
from splitledger.services.group_membership import is_active_member
from splitledger.utils.telegram_dep import get_current_telegram_user
from splitledger.utils.groups import get_group_or_404, require_membership
from splitledger.utils.splits import HTTP_422

log = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=List[PaymentOut])
def get_payments(
    group_id: int = Query(..., description="ID группы"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_telegram_user),
):
    require_membership(db, group_id, current_user.id)
    return (
        db.query(Payment)
        .filter(Payment.group_id == group_id)
        .order_by(Payment.date.desc(), Payment.id.desc())
        .all()
    )


@router.post("/", response_model=PaymentOut, status_code=status.HTTP_201_CREATED)
def record_payment(
    payload: PaymentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_telegram_user),
):
    """
    Записать перевод от текущего пользователя участнику группы.
    Реальных денег не двигаем: только учёт.
    """
    get_group_or_404(db, payload.group_id)

    if payload.to_user_id == current_user.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot pay yourself")

    if not (
        is_active_member(db, payload.group_id, current_user.id)
        and is_active_member(db, payload.group_id, payload.to_user_id)
    ):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Both users must be members of the group")

    if payload.amount <= 0:
        raise HTTPException(status_code=HTTP_422, detail="Amount must be positive")

    payment = Payment(
        group_id=payload.group_id,
        from_user_id=current_user.id,
        to_user_id=payload.to_user_id,
        amount=payload.amount,
        description=(payload.description or None),
        date=datetime.utcnow(),
    )
    db.add(payment)
    db.commit()
    db.refresh(payment)

    log.info(
        "payment recorded: id=%s group=%s %s -> %s amount=%s",
        payment.id, payment.group_id, payment.from_user_id, payment.to_user_id, payload.amount,
    )
    return payment
