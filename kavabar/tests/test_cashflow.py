from datetime import date

import pytest
from conftest import auth_headers

from kavabar.core.errors import ValidationError
from kavabar.core.scope import Scope
from kavabar.models.adjustment import Adjustment
from kavabar.models.powder_purchase import PowderPurchase
from kavabar.services.cashflow_service import DAY_COLUMNS, DayBreakdown, get_period_summary, period_bounds, resolve_window
from kavabar.services.entry_service import upsert_entry


def test_period_bounds():
    # 2024-01-03 is a Wednesday
    assert period_bounds("daily", date(2024, 1, 3)) == (date(2024, 1, 3), date(2024, 1, 3))
    assert period_bounds("weekly", date(2024, 1, 3)) == (date(2024, 1, 1), date(2024, 1, 7))
    assert period_bounds("weekly", date(2024, 1, 7)) == (date(2024, 1, 1), date(2024, 1, 7))
    assert period_bounds("monthly", date(2024, 2, 10)) == (date(2024, 2, 1), date(2024, 2, 29))
    with pytest.raises(ValidationError):
        period_bounds("yearly", date(2024, 1, 1))


def test_explicit_window_must_be_complete_and_ordered():
    assert resolve_window("monthly", start_date=date(2024, 1, 5), end_date=date(2024, 1, 9)) == (
        date(2024, 1, 5),
        date(2024, 1, 9),
    )
    with pytest.raises(ValidationError):
        resolve_window("monthly", start_date=date(2024, 1, 5))
    with pytest.raises(ValidationError):
        resolve_window("monthly", start_date=date(2024, 1, 9), end_date=date(2024, 1, 5))
    with pytest.raises(ValidationError):
        resolve_window("hourly")


def _seed(db, owner):
    # profit 200 + 20 - 63 = 157
    upsert_entry(db, owner.id, date(2024, 1, 10), {"cash_in_hand": 200, "waiter_expense": 20, "packets_used": 1})
    # profit 100 + 50 - 63 = 87
    upsert_entry(
        db,
        owner.id,
        date(2024, 1, 11),
        {"cash_in_hand": 100, "cups_used": 8, "credit_entries": [{"name": "A", "amount": 50}]},
    )
    db.add(
        PowderPurchase(
            user_id=owner.id,
            purchase_date=date(2024, 1, 10),
            packets_purchased=2,
            cost_per_packet=63,
            total_cost=126,
        )
    )
    db.add(Adjustment(user_id=owner.id, date=date(2024, 1, 11), type="cash", amount=-10, notes="till short"))
    db.add(Adjustment(user_id=owner.id, date=date(2024, 1, 12), type="powder", amount=3, notes="recount"))
    # Outside the window
    upsert_entry(db, owner.id, date(2024, 2, 1), {"cash_in_hand": 1000})
    db.commit()


def test_monthly_summary(db, alice):
    _seed(db, alice)
    summary = get_period_summary(db, Scope(owner_id=alice.id), "monthly", anchor=date(2024, 1, 20))

    assert summary["start_date"] == "2024-01-01"
    assert summary["end_date"] == "2024-01-31"
    assert summary["income"] == {"total_cash_in_hand": 300, "total_credits": 50, "total": 350}
    assert summary["expenses"]["powder_purchases"] == 126
    assert summary["expenses"]["operational_expenses"] == 20
    assert summary["expenses"]["waiter"] == 20
    assert summary["expenses"]["total"] == 146
    assert summary["usage"] == {"powder_cost": 126, "packets_used": 1, "cups_used": 8}
    assert summary["purchases"] == {"packets_purchased": 2, "total_cost": 126}
    assert summary["adjustments"] == {"cash": -10, "powder": 3}
    assert summary["profit"] == 244
    assert summary["net_cashflow"] == 194


def test_breakdown_adds_up_to_totals(db, alice):
    _seed(db, alice)
    summary = get_period_summary(db, Scope(owner_id=alice.id), "monthly", anchor=date(2024, 1, 1))

    days = summary["entries"]
    assert [d["date"] for d in days] == ["2024-01-12", "2024-01-11", "2024-01-10"]
    assert [d["entries_count"] for d in days] == [0, 1, 1]
    for column in DAY_COLUMNS:
        assert sum(d[column] for d in days) == summary["totals"][column]
    assert days[1]["net_cashflow"] == 150 - 10
    assert days[2]["waiter_expense"] == 20


def test_day_rows_declare_every_column():
    assert set(DAY_COLUMNS) <= set(DayBreakdown.__annotations__)


def test_summary_without_adjustments_table(engine, db, alice):
    owner_id = alice.id
    _seed(db, alice)
    db.close()
    Adjustment.__table__.drop(bind=engine)

    summary = get_period_summary(db, Scope(owner_id=owner_id), "monthly", anchor=date(2024, 1, 1))
    assert summary["adjustments"] == {"cash": 0, "powder": 0}
    assert summary["net_cashflow"] == 204
    assert summary["profit"] == 244


def test_reports_endpoints(client, db, alice, bob):
    _seed(db, alice)
    upsert_entry(db, bob.id, date(2024, 1, 10), {"cash_in_hand": 5})

    r = client.get("/reports", params={"date": "2024-01-10"}, headers=auth_headers(alice))
    assert r.status_code == 200
    body = r.json()
    assert body["period"] == "daily"
    assert body["income"]["total_cash_in_hand"] == 200

    r = client.get(
        "/cashflow",
        params={"start_date": "2024-01-01", "end_date": "2024-01-31", "user_id": bob.id},
        headers=auth_headers(alice),
    )
    assert r.status_code == 200
    assert r.json()["profit"] == 244

    r = client.get("/cashflow", params={"period": "weekly", "date": "2024-01-10"}, headers=auth_headers(bob))
    assert r.json()["start_date"] == "2024-01-08"
    assert r.json()["income"]["total"] == 5

    r = client.get("/cashflow", params={"start_date": "2024-01-01"}, headers=auth_headers(alice))
    assert r.status_code == 400
