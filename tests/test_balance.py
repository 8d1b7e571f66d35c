from decimal import Decimal
from types import SimpleNamespace

from splitledger.utils.balance import (
    BALANCE_EPS,
    compute_balances,
    equal_split_amounts,
    resolve_expense_splits,
)


def member(uid, name):
    return SimpleNamespace(id=uid, name=name)


def expense(eid, amount, paid_by):
    return SimpleNamespace(id=eid, amount=amount, paid_by=paid_by)


def split(user_id, amount):
    return SimpleNamespace(user_id=user_id, amount=amount, percentage=None)


def payment(from_user_id, to_user_id, amount):
    return SimpleNamespace(from_user_id=from_user_id, to_user_id=to_user_id, amount=amount)


A, B, C = member(1, "A"), member(2, "B"), member(3, "C")


def by_id(balances):
    return {b["user"].id: b for b in balances}


def test_every_member_gets_a_zero_balance_without_activity():
    balances = compute_balances([A, B, C], [], {}, [])

    assert [b["user"] for b in balances] == [A, B, C]
    for b in balances:
        assert b["total_paid"] == b["total_owed"] == b["total_received"] == b["net_balance"] == 0


def test_two_members_equal_split():
    exp = expense(10, 100, paid_by=1)
    balances = by_id(compute_balances([A, B], [exp], {10: [split(1, 50), split(2, 50)]}, []))

    assert balances[1]["total_paid"] == 100
    assert balances[1]["total_owed"] == 50
    assert balances[1]["net_balance"] == 50
    assert balances[2]["net_balance"] == -50


def test_direct_payment_settles_debts_scenario():
    exp = expense(10, 90, paid_by=1)
    splits = {10: [split(1, 30), split(2, 30), split(3, 30)]}
    balances = by_id(compute_balances([A, B, C], [exp], splits, [payment(2, 3, 30)]))

    assert balances[1]["total_paid"] == 90
    assert balances[1]["total_owed"] == 30
    assert balances[1]["net_balance"] == 60

    assert balances[2]["total_paid"] == 30
    assert balances[2]["total_owed"] == 30
    assert balances[2]["net_balance"] == 0

    assert balances[3]["total_received"] == 30
    assert balances[3]["total_owed"] == 30
    assert balances[3]["net_balance"] == 0


def test_legacy_expense_matches_explicit_equal_split():
    exp = expense(10, 99, paid_by=2)
    explicit = {10: [split(1, 33), split(2, 33), split(3, 33)]}

    legacy = compute_balances([A, B, C], [exp], {}, [])
    legacy_empty_list = compute_balances([A, B, C], [exp], {10: []}, [])
    persisted = compute_balances([A, B, C], [exp], explicit, [])

    for got in (legacy, legacy_empty_list):
        for x, y in zip(got, persisted):
            assert x["user"] is y["user"]
            assert abs(x["net_balance"] - y["net_balance"]) <= BALANCE_EPS
            assert abs(x["total_owed"] - y["total_owed"]) <= BALANCE_EPS


def test_legacy_split_follows_current_membership():
    exp = expense(10, 90, paid_by=1)

    three = by_id(compute_balances([A, B, C], [exp], {}, []))
    two = by_id(compute_balances([A, B], [exp], {}, []))

    assert three[2]["total_owed"] == 30
    assert two[2]["total_owed"] == 45


def test_non_member_payer_and_split_are_dropped():
    outsider = 99
    exp = expense(10, 60, paid_by=outsider)
    splits = {10: [split(1, 20), split(2, 20), split(outsider, 20)]}
    balances = by_id(compute_balances([A, B], [exp], splits, [payment(outsider, 1, 5), payment(2, outsider, 7)]))

    assert set(balances) == {1, 2}
    assert balances[1]["total_paid"] == 0
    assert balances[1]["total_owed"] == 20
    assert balances[1]["total_received"] == 5
    assert balances[2]["total_paid"] == 7
    assert balances[2]["total_owed"] == 20


def test_net_balances_sum_to_zero_for_expenses():
    members = [A, B, C]
    expenses = [expense(1, "10.10", 1), expense(2, 33.33, 2), expense(3, 100, 3)]
    splits = {
        1: [split(1, "5.05"), split(3, "5.05")],
        # расход 2: legacy, делится на троих
        3: [split(1, 70), split(2, 30)],
    }
    balances = compute_balances(members, expenses, splits, [])

    total = sum(b["net_balance"] for b in balances)
    assert abs(total) <= BALANCE_EPS * len(members)


def test_payments_count_towards_paid_and_received():
    # платёж учитывается и у отправителя (paid), и у получателя (received)
    balances = compute_balances([A, B], [], {}, [payment(1, 2, 25)])

    assert sum(b["net_balance"] for b in balances) == 2 * 25
    assert by_id(balances)[1]["total_paid"] == 25
    assert by_id(balances)[2]["total_received"] == 25


def test_compute_balances_is_idempotent_and_returns_decimals():
    args = ([A, B, C], [expense(1, 100, 1)], {}, [payment(2, 1, 10)])

    first = compute_balances(*args)
    second = compute_balances(*args)

    assert first == second
    assert all(isinstance(b["net_balance"], Decimal) for b in first)


def test_equal_split_amounts_sum_to_total():
    parts = equal_split_amounts(100, [1, 2, 3])

    assert len(parts) == 3
    assert abs(sum(p["amount"] for p in parts) - 100) <= BALANCE_EPS
    assert abs(sum(p["percentage"] for p in parts) - 100) <= BALANCE_EPS


def test_equal_split_amounts_without_members_is_empty():
    assert equal_split_amounts(100, []) == []


def test_resolve_expense_splits_prefers_persisted_rows():
    exp = expense(1, 50, 1)

    resolved = resolve_expense_splits(exp, [split(2, 50)], [1, 2])

    assert resolved == [{"user_id": 2, "amount": Decimal("50"), "percentage": None}]
