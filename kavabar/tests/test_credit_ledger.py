from datetime import date

from conftest import auth_headers

from kavabar.core.scope import Scope
from kavabar.models.credit_payment import CreditPayment
from kavabar.models.daily_entry import DailyEntry
from kavabar.services.credit_ledger_service import get_creditors_report
from kavabar.services.entry_service import upsert_entry


def _seed(db, owner):
    upsert_entry(
        db,
        owner.id,
        date(2024, 5, 1),
        {
            "group_name": "Friday circle",
            "bookkeeper_name": "Ana",
            "credit_entries": [{"name": "A", "amount": 100}, {"name": "B", "amount": 50}],
        },
    )
    db.add(CreditPayment(user_id=owner.id, creditor_name="A", payment_date=date(2024, 5, 3), amount=40))
    db.commit()


def test_ledger_totals_and_balances(db, alice):
    _seed(db, alice)
    ledger = get_creditors_report(db, Scope(owner_id=alice.id))

    assert ledger["total_credits"] == 150
    assert ledger["total_payments"] == 40
    assert ledger["outstanding_balance"] == 110
    assert ledger["count"] == 3
    assert ledger["unique_creditors"] == ["A", "B"]
    assert ledger["unique_groups"] == ["Friday circle"]
    assert ledger["creditors"] == [
        {"name": "A", "total_credits": 100, "total_payments": 40, "outstanding_balance": 60},
        {"name": "B", "total_credits": 50, "total_payments": 0, "outstanding_balance": 50},
    ]

    records = ledger["records"]
    assert [(r["date"], r["type"], r["creditor_name"]) for r in records] == [
        ("2024-05-03", "payment", "A"),
        ("2024-05-01", "credit", "A"),
        ("2024-05-01", "credit", "B"),
    ]
    assert records[1]["bookkeeper_name"] == "Ana"
    assert records[1]["group_name"] == "Friday circle"


def test_creditor_filter_is_case_insensitive_substring(db, alice):
    _seed(db, alice)
    ledger = get_creditors_report(db, Scope(owner_id=alice.id), creditor_name="a")

    assert {r["creditor_name"] for r in ledger["records"]} == {"A"}
    assert ledger["outstanding_balance"] == 60


def test_malformed_credit_entries_are_skipped(db, alice):
    _seed(db, alice)
    db.add(DailyEntry(user_id=alice.id, date=date(2024, 5, 2), credit_entries="{not json"))
    db.add(DailyEntry(user_id=alice.id, date=date(2024, 5, 4), credit_entries='[{"amount": 5}, "oops"]'))
    db.commit()

    ledger = get_creditors_report(db, Scope(owner_id=alice.id))
    assert ledger["total_credits"] == 150
    assert ledger["count"] == 3


def test_date_window_applies_to_credits_and_payments(db, alice):
    _seed(db, alice)
    ledger = get_creditors_report(db, Scope(owner_id=alice.id), start_date=date(2024, 5, 2))
    assert ledger["total_credits"] == 0
    assert ledger["total_payments"] == 40
    assert ledger["outstanding_balance"] == -40


def test_creditors_endpoint_scope(client, db, make_user, alice, bob):
    manager = make_user("mgr", role="manager")
    _seed(db, alice)
    upsert_entry(db, bob.id, date(2024, 5, 1), {"credit_entries": [{"name": "C", "amount": 10}]})

    own = client.get("/creditors", headers=auth_headers(bob)).json()
    assert own["total_credits"] == 10

    everyone = client.get("/creditors", headers=auth_headers(manager)).json()
    assert everyone["total_credits"] == 160
    assert everyone["outstanding_balance"] == 120

    one = client.get("/creditors", params={"user_id": alice.id}, headers=auth_headers(manager)).json()
    assert one["unique_creditors"] == ["A", "B"]


def test_credit_payments_api(client, alice, bob):
    r = client.post(
        "/credit-payments",
        json={"creditor_name": " A ", "payment_date": "2024-05-03", "amount": 25},
        headers=auth_headers(alice),
    )
    assert r.status_code == 201
    payment = r.json()
    assert payment["creditor_name"] == "A"

    r = client.post(
        "/credit-payments",
        json={"creditor_name": "A", "payment_date": "2024-05-03", "amount": 0},
        headers=auth_headers(alice),
    )
    assert r.status_code == 400

    r = client.post("/credit-payments", json={"creditor_name": "A"}, headers=auth_headers(alice))
    assert r.status_code == 400

    r = client.delete("/credit-payments", params={"id": payment["id"]}, headers=auth_headers(bob))
    assert r.status_code == 403

    r = client.delete("/credit-payments", params={"id": payment["id"]}, headers=auth_headers(alice))
    assert r.status_code == 200
    assert client.get("/credit-payments", headers=auth_headers(alice)).json() == []

    r = client.delete("/credit-payments", params={"id": payment["id"]}, headers=auth_headers(alice))
    assert r.status_code == 404


def test_items_with_unusable_names_or_amounts_are_skipped(db, alice):
    upsert_entry(db, alice.id, date(2024, 5, 1), {"credit_entries": [{"name": "A", "amount": 100}]})
    db.add(
        DailyEntry(
            user_id=alice.id,
            date=date(2024, 5, 2),
            credit_entries='[{"name": 7, "amount": 5}, {"name": "A", "amount": "nan"}, {"name": "B", "amount": "inf"}]',
        )
    )
    db.commit()

    ledger = get_creditors_report(db, Scope(owner_id=alice.id))
    assert ledger["total_credits"] == 100
    assert ledger["unique_creditors"] == ["A"]

    filtered = get_creditors_report(db, Scope(owner_id=alice.id), creditor_name="a")
    assert filtered["total_credits"] == 100
    assert filtered["count"] == 1


def test_ledger_without_credit_payments_table(engine, db, alice):
    owner_id = alice.id
    _seed(db, alice)
    db.close()
    CreditPayment.__table__.drop(bind=engine)

    ledger = get_creditors_report(db, Scope(owner_id=owner_id))
    assert ledger["total_credits"] == 150
    assert ledger["total_payments"] == 0
    assert ledger["outstanding_balance"] == 150
