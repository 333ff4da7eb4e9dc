from conftest import auth_headers


def test_purchase_lifecycle(client, alice, bob):
    headers = auth_headers(alice)
    r = client.post(
        "/powder-purchases",
        json={"purchase_date": "2024-07-01", "packets_purchased": 3, "payment_method": "cash", "supplier_name": "Tonga Kava"},
        headers=headers,
    )
    assert r.status_code == 201
    purchase = r.json()
    assert purchase["cost_per_packet"] == 63
    assert purchase["total_cost"] == 189

    r = client.put(
        "/powder-purchases",
        json={"id": purchase["id"], "purchase_date": "2024-07-02", "packets_purchased": 2, "cost_per_packet": 60},
        headers=headers,
    )
    assert r.status_code == 200
    assert r.json()["total_cost"] == 120

    r = client.delete("/powder-purchases", params={"id": purchase["id"]}, headers=auth_headers(bob))
    assert r.status_code == 403
    r = client.delete("/powder-purchases", params={"id": purchase["id"]}, headers=headers)
    assert r.json() == {"success": True}
    r = client.delete("/powder-purchases", params={"id": purchase["id"]}, headers=headers)
    assert r.status_code == 404


def test_purchase_validation(client, alice):
    headers = auth_headers(alice)
    for body in (
        {"purchase_date": "2024-07-01", "packets_purchased": 0},
        {"purchase_date": "2024-07-01", "packets_purchased": 1, "cost_per_packet": -1},
        {"purchase_date": "2024-07-01", "packets_purchased": 1, "payment_method": "barter"},
    ):
        assert client.post("/powder-purchases", json=body, headers=headers).status_code == 400
    assert client.get("/powder-purchases", headers=headers).json() == []


def test_adjustments(client, admin, alice, bob):
    r = client.post(
        "/adjustments",
        json={"date": "2024-07-01", "type": "powder", "amount": -12, "notes": " wet packet "},
        headers=auth_headers(alice),
    )
    assert r.status_code == 201
    assert r.json()["notes"] == "wet packet"

    for body in (
        {"date": "2024-07-01", "type": "powder", "amount": 1},
        {"date": "2024-07-01", "type": "powder", "amount": 1, "notes": "   "},
        {"date": "2024-07-01", "type": "stock", "amount": 1, "notes": "x"},
        {"type": "cash", "amount": 1, "notes": "x"},
    ):
        assert client.post("/adjustments", json=body, headers=auth_headers(alice)).status_code == 400

    client.post(
        "/adjustments",
        json={"date": "2024-07-02", "type": "cash", "amount": 20, "notes": "found"},
        headers=auth_headers(bob),
    )

    r = client.get("/inventory", headers=auth_headers(alice))
    assert r.json()["formatted"] == {"packets": -1, "cups": -4}

    # Clearing only touches the caller's own adjustments
    r = client.delete("/adjustments", headers=auth_headers(alice))
    assert r.json()["deleted"] == 1
    assert len(client.get("/adjustments", headers=auth_headers(admin)).json()) == 1
