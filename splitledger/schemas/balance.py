# splitledger/schemas/balance.py

from pydantic import BaseModel

from .user import MemberOut


class BalanceOut(BaseModel):
    """
    Баланс участника группы (не хранится, считается на каждый запрос).
    net_balance = total_paid + total_received - total_owed;
    net > 0: участнику должны, net < 0: он должен.
    """
    user: MemberOut
    total_paid: float
    total_owed: float
    total_received: float
    net_balance: float
