# splitledger/schemas/settlement.py

from pydantic import BaseModel

from .user import MemberOut


class SettlementOut(BaseModel):
    """
    Рекомендованный перевод для settle-up (жадный алгоритм).
    Только подсказка: платёж не создаётся.
    """
    from_user: MemberOut  # должник
    to_user: MemberOut    # кредитор
    amount: float         # > 0, округлено до 2 знаков
