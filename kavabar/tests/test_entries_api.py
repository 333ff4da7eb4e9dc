from conftest import auth_headers


def test_post_creates_then_replaces(client, alice):
    headers = auth_headers(alice)
    r = client.post("/entries", json={"date": "2024-03-01", "cash_in_hand": 100, "packets_used": 1}, headers=headers)
    assert r.status_code == 201
    body = r.json()
    assert body["updated"] is False
    assert body["user_id"] == alice.id
    assert body["powder_cost"] == 63
    assert body["profit"] == 37

    # Full replace: fields not sent fall back to their defaults
    r = client.post("/entries", json={"date": "2024-03-01", "cash_in_hand": 80}, headers=headers)
    assert r.status_code == 200
    body = r.json()
    assert body["updated"] is True
    assert body["packets_used"] == 0
    assert body["powder_cost"] == 0
    assert body["profit"] == 80

    r = client.get("/entries", headers=headers)
    assert len(r.json()) == 1


def test_patch_only_touches_supplied_fields(client, alice):
    headers = auth_headers(alice)
    created = client.post(
        "/entries",
        json={"date": "2024-03-02", "cash_in_hand": 120, "cups_used": 3, "waiter_expense": 15},
        headers=headers,
    ).json()

    r = client.patch("/entries", json={"date": "2024-03-02", "notes": "rain"}, headers=headers)
    assert r.status_code == 200
    patched = r.json()
    assert patched["updated"] is True
    assert patched["notes"] == "rain"
    for field in ("cash_in_hand", "cups_used", "waiter_expense", "powder_cost", "profit"):
        assert patched[field] == created[field]

    # Same patch twice gives the same row
    again = client.patch("/entries", json={"date": "2024-03-02", "notes": "rain"}, headers=headers).json()
    assert again == patched


def test_patch_recomputes_profit_when_an_input_changes(client, alice):
    headers = auth_headers(alice)
    client.post("/entries", json={"date": "2024-03-03", "cash_in_hand": 100, "packets_used": 1}, headers=headers)
    body = client.patch("/entries", json={"date": "2024-03-03", "cash_in_hand": 163}, headers=headers).json()
    assert body["profit"] == 100
    assert body["packets_used"] == 1


def test_patch_on_a_missing_date_creates_the_entry(client, alice):
    r = client.patch("/entries", json={"date": "2024-03-04", "cash_in_hand": 10}, headers=auth_headers(alice))
    assert r.status_code == 201
    assert r.json()["updated"] is False
    assert r.json()["profit"] == 10


def test_credit_line_items_drive_credits(client, alice):
    body = client.post(
        "/entries",
        json={
            "date": "2024-03-05",
            "credits": 1,
            "credit_entries": [{"name": "Sione", "amount": 30}, {"name": "Mele", "amount": 20}],
            "servers_names": '["Tevita", "Losa"]',
        },
        headers=auth_headers(alice),
    ).json()
    assert body["credits"] == 50
    assert body["credit_entries"] == [{"name": "Sione", "amount": 30}, {"name": "Mele", "amount": 20}]
    assert body["servers_names"] == ["Tevita", "Losa"]


def test_invalid_writes_are_rejected(client, alice):
    headers = auth_headers(alice)
    r = client.post("/entries", json={"cash_in_hand": 10}, headers=headers)
    assert r.status_code == 400
    assert r.json()["detail"] == "Date is required"

    r = client.post("/entries", json={"date": "2024-03-06", "waiter_expense": -5}, headers=headers)
    assert r.status_code == 400

    r = client.post(
        "/entries",
        content=b'{"date": "2024-03-06", "cash_in_hand": NaN}',
        headers={**headers, "Content-Type": "application/json"},
    )
    assert r.status_code == 400
    assert client.get("/entries", headers=headers).json() == []


def test_user_cannot_write_for_someone_else(client, alice, bob):
    r = client.post("/entries", json={"date": "2024-03-07", "user_id": bob.id}, headers=auth_headers(alice))
    assert r.status_code == 403


def test_admin_writes_for_another_user(client, admin, alice):
    r = client.post("/entries", json={"date": "2024-03-07", "user_id": alice.id}, headers=auth_headers(admin))
    assert r.status_code == 201
    assert r.json()["user_id"] == alice.id

    r = client.post("/entries", json={"date": "2024-03-07", "user_id": 9999}, headers=auth_headers(admin))
    assert r.status_code == 404


def test_listing_is_scoped(client, admin, alice, bob):
    client.post("/entries", json={"date": "2024-03-08"}, headers=auth_headers(alice))
    client.post("/entries", json={"date": "2024-03-09"}, headers=auth_headers(bob))

    mine = client.get("/entries", params={"user_id": bob.id}, headers=auth_headers(alice)).json()
    assert [e["user_id"] for e in mine] == [alice.id]

    everyone = client.get("/entries", headers=auth_headers(admin)).json()
    assert [e["date"] for e in everyone] == ["2024-03-09", "2024-03-08"]

    only_bob = client.get("/entries", params={"user_id": bob.id}, headers=auth_headers(admin)).json()
    assert [e["user_id"] for e in only_bob] == [bob.id]


def test_entries_require_a_token(client):
    assert client.get("/entries").status_code == 401
