import warnings
from datetime import datetime
from decimal import Decimal

from conftest import as_user
from splitledger.models.expense import Expense


def balances(client, group_id, user):
    resp = client.get(f"/api/groups/{group_id}/balances", headers=as_user(user))
    assert resp.status_code == 200, resp.text
    return {b["user"]["id"]: b for b in resp.json()}


def settle_up(client, group_id, user):
    resp = client.get(f"/api/groups/{group_id}/settle-up", headers=as_user(user))
    assert resp.status_code == 200, resp.text
    return [(s["from_user"]["id"], s["to_user"]["id"], s["amount"]) for s in resp.json()]


def test_new_group_has_zero_balances_and_nothing_to_settle(client, make_group, alice, bob):
    group_id = make_group(alice, bob)

    result = balances(client, group_id, alice)

    assert set(result) == {alice.id, bob.id}
    assert all(b["net_balance"] == 0 for b in result.values())
    assert settle_up(client, group_id, alice) == []


def test_two_members_equal_expense(client, make_group, alice, bob):
    group_id = make_group(alice, bob)
    client.post(
        "/api/expenses/",
        json={"group_id": group_id, "description": "Dinner", "amount": "100"},
        headers=as_user(alice),
    )

    result = balances(client, group_id, bob)

    assert result[alice.id]["total_paid"] == 100
    assert result[alice.id]["total_owed"] == 50
    assert result[alice.id]["net_balance"] == 50
    assert result[bob.id]["net_balance"] == -50
    assert settle_up(client, group_id, bob) == [(bob.id, alice.id, 50)]


def test_payment_to_third_member(client, make_group, alice, bob, carol):
    group_id = make_group(alice, bob, carol)
    client.post(
        "/api/expenses/",
        json={"group_id": group_id, "description": "Cabin", "amount": "90"},
        headers=as_user(alice),
    )
    paid = client.post(
        "/api/payments/",
        json={"group_id": group_id, "to_user_id": carol.id, "amount": "30"},
        headers=as_user(bob),
    )
    assert paid.status_code == 201

    result = balances(client, group_id, alice)

    assert result[alice.id]["net_balance"] == 60
    assert result[bob.id]["net_balance"] == 0
    assert result[carol.id]["total_received"] == 30
    assert result[carol.id]["net_balance"] == 0
    assert settle_up(client, group_id, alice) == []


def test_legacy_expense_is_split_between_current_members(client, db, make_group, alice, bob, carol):
    group_id = make_group(alice, bob, carol)
    db.add(Expense(
        group_id=group_id,
        description="Imported",
        amount=Decimal("90"),
        paid_by=alice.id,
        split_type=None,
        date=datetime.utcnow(),
        created_by=alice.id,
    ))
    db.commit()

    result = balances(client, group_id, alice)
    assert result[alice.id]["net_balance"] == 60
    assert result[bob.id]["total_owed"] == 30
    assert result[carol.id]["net_balance"] == -30

    settlements = settle_up(client, group_id, alice)
    assert sorted(settlements) == sorted([(bob.id, alice.id, 30), (carol.id, alice.id, 30)])


def test_legacy_split_is_not_persisted(client, db, make_group, alice, bob):
    group_id = make_group(alice, bob)
    expense = Expense(
        group_id=group_id, description="Imported", amount=Decimal("10"),
        paid_by=alice.id, date=datetime.utcnow(), created_by=alice.id,
    )
    db.add(expense)
    db.commit()

    balances(client, group_id, alice)

    body = client.get(f"/api/expenses/{expense.id}", headers=as_user(alice)).json()
    assert body["splits"] == []
    assert body["split_type"] is None


def test_mixed_splits_are_settled(client, make_group, make_user, alice, bob):
    dave = make_user("Dave")
    group_id = make_group(alice, bob, dave)
    client.post(
        "/api/expenses/",
        json={
            "group_id": group_id, "description": "Flights", "amount": "300", "split_type": "amount",
            "splits": [
                {"user_id": alice.id, "amount": "100"},
                {"user_id": bob.id, "amount": "150"},
                {"user_id": dave.id, "amount": "50"},
            ],
        },
        headers=as_user(alice),
    )
    client.post(
        "/api/expenses/",
        json={
            "group_id": group_id, "description": "Car", "amount": "60", "split_type": "percentage",
            "splits": [{"user_id": alice.id, "percentage": "50"}, {"user_id": dave.id, "percentage": "50"}],
        },
        headers=as_user(bob),
    )

    result = balances(client, group_id, alice)

    assert result[alice.id]["net_balance"] == 170
    assert result[bob.id]["net_balance"] == -90
    assert result[dave.id]["net_balance"] == -80
    assert abs(sum(b["net_balance"] for b in result.values())) <= 0.01
    assert settle_up(client, group_id, alice) == [(bob.id, alice.id, 90), (dave.id, alice.id, 80)]


def test_balances_require_membership(client, make_group, alice, carol):
    group_id = make_group(alice)

    assert client.get(f"/api/groups/{group_id}/balances", headers=as_user(carol)).status_code == 403
    assert client.get(f"/api/groups/{group_id}/settle-up", headers=as_user(carol)).status_code == 403
    assert client.get("/api/groups/424242/balances", headers=as_user(alice)).status_code == 404


def test_payment_validation(client, make_group, alice, bob, carol):
    group_id = make_group(alice, bob)

    def pay(user, to_user_id, amount="10"):
        return client.post(
            "/api/payments/",
            json={"group_id": group_id, "to_user_id": to_user_id, "amount": amount},
            headers=as_user(user),
        )

    assert pay(alice, alice.id).status_code == 400
    assert pay(alice, carol.id).status_code == 403
    assert pay(carol, alice.id).status_code == 403
    assert pay(alice, bob.id, amount="0").status_code == 422
    assert client.post(
        "/api/payments/",
        json={"group_id": 999, "to_user_id": bob.id, "amount": "5"},
        headers=as_user(alice),
    ).status_code == 404

    listed = client.get("/api/payments/", params={"group_id": group_id}, headers=as_user(bob)).json()
    assert listed == []


def test_rejected_payment_raises_no_deprecation_warning(client, make_group, alice, bob):
    group_id = make_group(alice, bob)

    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        resp = client.post(
            "/api/payments/",
            json={"group_id": group_id, "to_user_id": bob.id, "amount": "-1"},
            headers=as_user(alice),
        )

    assert resp.status_code == 422
    assert not [w for w in caught if "UNPROCESSABLE_ENTITY" in str(w.message)]
    assert resp.json()["detail"] == "Amount must be positive"
