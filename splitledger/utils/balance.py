# splitledger/utils/balance.py
# -----------------------------------------------------------------------------
# УТИЛИТЫ РАСЧЁТА БАЛАНСОВ / SETTLE-UP
# -----------------------------------------------------------------------------
# Политика:
#   • Одна валюта, без конверсии.
#   • Внутренние расчёты: Decimal; наружу (API) отдаём float, округлённый до 2 знаков.
#   • Семантика net:
#       net > 0: участнику ДОЛЖНЫ; net < 0: он ДОЛЖЕН.
#       net = total_paid + total_received − total_owed.
#   • Платёж (payment) from -> to на X:
#       X идёт в total_paid отправителя и в total_received получателя.
#   • Legacy-расход (без строк expense_splits) делится поровну между
#     ТЕКУЩИМИ участниками при каждом чтении; в БД ничего не пишем.
#   • Участники не из текущего состава (вышли/удалены) молча пропускаются.
#   • Алгоритм settle-up: жадное сведение должников и кредиторов по net
#     (не гарантирует минимум переводов для любых графов).
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

log = logging.getLogger(__name__)

# Единый допуск: сверка сумм долей, сумма процентов, классификация
# кредиторов/должников, порог выдачи перевода, проверки «нулевого» баланса.
BALANCE_EPS = Decimal("0.01")

HUNDRED = Decimal("100")

SPLIT_EQUAL = "equal"
SPLIT_AMOUNT = "amount"
SPLIT_PERCENTAGE = "percentage"
SPLIT_TYPES = (SPLIT_EQUAL, SPLIT_AMOUNT, SPLIT_PERCENTAGE)


# =========================
# ВСПОМОГАТЕЛЬНОЕ
# =========================

def _D(x) -> Decimal:
    if isinstance(x, Decimal):
        return x
    if x is None:
        return Decimal("0")
    return Decimal(str(x))


def _member_id(member: Any) -> Any:
    return getattr(member, "id", member)


# =========================
# ДОЛИ РАСХОДА (с legacy-фолбэком)
# =========================

def equal_split_amounts(amount, member_ids: Sequence[Any]) -> List[Dict[str, Any]]:
    """
    Равное деление суммы между участниками: amount / N каждому, процент 100 / N.
    Для пустого списка участников возвращает [] (деление на ноль не выполняем).
    """
    member_ids = list(member_ids)
    if not member_ids:
        return []
    n = Decimal(len(member_ids))
    per_user = _D(amount) / n
    per_pct = HUNDRED / n
    return [{"user_id": uid, "amount": per_user, "percentage": per_pct} for uid in member_ids]


def resolve_expense_splits(
    expense: Any,
    persisted_splits: Optional[Iterable[Any]],
    member_ids: Sequence[Any],
) -> List[Dict[str, Any]]:
    """
    Возвращает доли расхода в виде [{"user_id", "amount", "percentage"}, ...].

    Если сохранённые строки есть: используем их как есть.
    Иначе это legacy-расход: синтезируем равное деление между текущими
    участниками группы (политика equal, применённая лениво).
    """
    rows = list(persisted_splits or [])
    if rows:
        return [
            {
                "user_id": getattr(s, "user_id", None),
                "amount": _D(getattr(s, "amount", 0)),
                "percentage": getattr(s, "percentage", None),
            }
            for s in rows
        ]
    return equal_split_amounts(getattr(expense, "amount", 0), member_ids)


# =========================
# БАЛАНСЫ
# =========================

def compute_balances(
    members: Sequence[Any],
    expenses: Iterable[Any],
    splits_by_expense: Mapping[Any, Iterable[Any]],
    payments: Iterable[Any],
) -> List[Dict[str, Any]]:
    """
    Считает баланс каждого текущего участника группы.

    members           : участники (объекты с .id; id служит ключом баланса);
    expenses          : расходы (.id, .amount, .paid_by);
    splits_by_expense : {expense_id: [split(.user_id, .amount), ...]};
                        отсутствие ключа или пустой список = legacy-расход;
    payments          : платежи (.from_user_id, .to_user_id, .amount).

    Возвращает список словарей
      {"user", "total_paid", "total_owed", "total_received", "net_balance"}
    в порядке members. Входные данные не изменяются.
    """
    balances: Dict[Any, Dict[str, Any]] = {}
    for member in members:
        balances[_member_id(member)] = {
            "user": member,
            "total_paid": Decimal("0"),
            "total_owed": Decimal("0"),
            "total_received": Decimal("0"),
            "net_balance": Decimal("0"),
        }
    member_ids = list(balances.keys())

    for expense in expenses:
        amount = _D(getattr(expense, "amount", 0))

        payer = balances.get(getattr(expense, "paid_by", None))
        if payer is not None:
            payer["total_paid"] += amount

        persisted = splits_by_expense.get(getattr(expense, "id", None))
        for split in resolve_expense_splits(expense, persisted, member_ids):
            owner = balances.get(split["user_id"])
            if owner is not None:
                owner["total_owed"] += split["amount"]

    for payment in payments:
        amount = _D(getattr(payment, "amount", 0))
        sender = balances.get(getattr(payment, "from_user_id", None))
        receiver = balances.get(getattr(payment, "to_user_id", None))
        if sender is not None:
            sender["total_paid"] += amount
        if receiver is not None:
            receiver["total_received"] += amount

    for bal in balances.values():
        bal["net_balance"] = bal["total_paid"] + bal["total_received"] - bal["total_owed"]

    return list(balances.values())


# =========================
# SETTLE-UP (жадный)
# =========================

def suggest_settlements(balances: Iterable[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """
    Жадный settle-up по net-балансам.
    Возвращает список переводов: [{"from_user", "to_user", "amount"}, ...],
    где from_user: должник, to_user: кредитор, amount > BALANCE_EPS.
    """
    balances = list(balances)

    creditors = sorted(
        [[b["user"], _D(b["net_balance"])] for b in balances if _D(b["net_balance"]) > BALANCE_EPS],
        key=lambda x: (-x[1], _member_id(x[0])),
    )
    debtors = sorted(
        [[b["user"], _D(b["net_balance"])] for b in balances if _D(b["net_balance"]) < -BALANCE_EPS],
        key=lambda x: (x[1], _member_id(x[0])),
    )

    settlements: List[Dict[str, Any]] = []
    i, j = 0, 0
    while i < len(creditors) and j < len(debtors):
        creditor = creditors[i]
        debtor = debtors[j]

        amount = min(creditor[1], -debtor[1])
        if amount > BALANCE_EPS:
            settlements.append({"from_user": debtor[0], "to_user": creditor[0], "amount": amount})

        creditor[1] -= amount
        debtor[1] += amount

        if creditor[1] < BALANCE_EPS:
            i += 1
        if debtor[1] > -BALANCE_EPS:
            j += 1

    log.debug("settle-up: %d creditors, %d debtors -> %d transfers", len(creditors), len(debtors), len(settlements))
    return settlements
