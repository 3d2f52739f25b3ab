"""
Tests for the JSON API.
"""

from datetime import date, timedelta

import pytest


def _create_item(client, **overrides):
    payload = {"code": "TS-001", "name": "Basic T-Shirt", "stock_qty": 30,
               "min_stock": 10, "max_stock": 200}
    payload.update(overrides)
    response = client.post("/api/items", json=payload)
    assert response.status_code == 201
    return response.get_json()["item"]


def test_health(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.get_json()["status"] == "ok"


def test_item_crud(client):
    item = _create_item(client)

    listing = client.get("/api/items").get_json()
    assert [i["code"] for i in listing["items"]] == ["TS-001"]
    assert listing["pagination"] == {"current": 1, "total": 1, "total_items": 1}

    response = client.put(f"/api/items/{item['id']}", json={"name": "Tee"})
    assert response.get_json()["item"]["name"] == "Tee"

    assert client.delete(f"/api/items/{item['id']}").status_code == 200
    assert client.get(f"/api/items/{item['id']}").status_code == 404


def test_validation_errors_map_to_400(client):
    response = client.post("/api/items", json={"code": "TS-001"})

    assert response.status_code == 400
    assert response.get_json() == {"error": "Code and name are required"}


def test_duplicates_map_to_409(client):
    _create_item(client)
    response = client.post("/api/items", json={"code": "TS-001", "name": "Again"})

    assert response.status_code == 409
    assert response.get_json() == {"error": "Item code already exists"}


def test_missing_rows_map_to_404(client):
    response = client.get("/api/items/unknown")

    assert response.status_code == 404
    assert response.get_json() == {"error": "Item not found"}


def test_only_missing_records_map_to_404(app, client):
    def broken():
        return {}["missing"]

    app.add_url_rule("/api/broken", "broken", broken)

    with pytest.raises(KeyError):
        client.get("/api/broken")


def test_item_limits_are_validated(client):
    item = _create_item(client, min_stock=None)
    assert item["min_stock"] == 10

    for changes, message in [
        ({"min_stock": None}, "min_stock must be a whole number"),
        ({"min_stock": "abc"}, "min_stock must be a whole number"),
        ({"max_stock": -1}, "max_stock cannot be negative"),
        ({"min_stock": 300}, "min_stock cannot exceed max_stock"),
    ]:
        response = client.put(f"/api/items/{item['id']}", json=changes)
        assert response.status_code == 400
        assert response.get_json() == {"error": message}

    stored = client.get(f"/api/items/{item['id']}").get_json()["item"]
    assert (stored["min_stock"], stored["max_stock"]) == (10, 200)


def test_stock_in_reversal_cannot_strand_issued_units(client):
    item = _create_item(client, stock_qty=50)
    receipt = client.post("/api/stock-in", json={"item_id": item["id"], "qty": 10,
                                                 "date": "2024-01-15"}).get_json()["stock_in"]
    client.post("/api/stock-out", json={"item_id": item["id"], "qty": 60, "date": "2024-01-16"})

    response = client.delete(f"/api/stock-in/{receipt['id']}")
    assert response.status_code == 400
    assert response.get_json() == {"error": "Insufficient stock"}
    assert client.get(f"/api/items/{item['id']}").get_json()["item"]["stock_qty"] == 0


def test_unknown_route(client):
    response = client.get("/api/nothing-here")

    assert response.status_code == 404
    assert response.get_json() == {"error": "Not found"}


def test_stock_movements(client):
    item = _create_item(client)

    response = client.post("/api/stock-in", json={"item_id": item["id"], "qty": 20, "date": "2024-01-15"})
    assert response.status_code == 201
    assert response.get_json()["stock_in"]["transaction_code"] == "TXN-IN-20240115-001"

    response = client.post("/api/stock-out", json={"item_id": item["id"], "qty": 45, "date": "2024-01-16"})
    assert response.status_code == 201

    response = client.post("/api/stock-out", json={"item_id": item["id"], "qty": 10, "date": "2024-01-16"})
    assert response.status_code == 400
    assert response.get_json() == {"error": "Insufficient stock"}

    assert client.get(f"/api/items/{item['id']}").get_json()["item"]["stock_qty"] == 5

    listing = client.get("/api/stock-out").get_json()
    assert listing["pagination"]["total_items"] == 1
    assert listing["stock_out"][0]["transaction_code"] == "TXN-OUT-20240116-001"


def test_categories(client):
    response = client.post("/api/categories", json={"name": "Apparel"})
    assert response.status_code == 201
    category = response.get_json()["category"]

    names = [c["name"] for c in client.get("/api/categories").get_json()["categories"]]
    assert names == ["Apparel"]

    assert client.delete(f"/api/categories/{category['id']}").status_code == 200
    assert client.get(f"/api/categories/{category['id']}").status_code == 404


def test_orders_and_users(client):
    item = _create_item(client)
    response = client.post("/api/users", json={
        "username": "supplier1", "password": "secret", "email": "s1@inventory.com",
        "role": "supplier", "name": "Supplier 1",
    })
    assert response.status_code == 201
    supplier = response.get_json()["user"]

    response = client.post("/api/orders", json={
        "supplier_id": supplier["id"],
        "items": [{"item_id": item["id"], "qty": 4, "price": 2500}],
    })
    assert response.status_code == 201
    order = response.get_json()["order"]
    assert order["total_amount"] == 10000
    assert len(order["items"]) == 1

    response = client.put(f"/api/orders/{order['id']}/status", json={"status": "confirmed"})
    assert response.get_json()["order"]["status"] == "confirmed"

    response = client.put(f"/api/orders/{order['id']}/status", json={})
    assert response.status_code == 400
    assert response.get_json() == {"error": "Status is required"}

    detail = client.get(f"/api/orders/{order['id']}").get_json()
    assert detail["order"]["supplier_name"] == "Supplier 1"
    assert detail["items"][0]["qty"] == 4


def test_item_prediction(client):
    item = _create_item(client, stock_qty=200, min_stock=10, max_stock=500)
    today = date.today()
    for offset, qty in enumerate([5, 10, 15, 20]):
        day = today - timedelta(days=10 - offset)
        response = client.post("/api/stock-out", json={
            "item_id": item["id"], "qty": qty, "date": day.isoformat()
        })
        assert response.status_code == 201

    response = client.get(f"/api/dashboard/prediction/{item['id']}?periods=3")
    assert response.status_code == 200
    body = response.get_json()

    assert body["item"]["stock_qty"] == 150
    assert [row["stock_out"] for row in body["historical_data"]] == [5, 10, 15, 20]
    assert body["prediction"]["slope"] == 2.5
    assert body["prediction"]["intercept"] == 12.5
    assert body["prediction"]["trend"] == "increasing"
    assert [p["value"] for p in body["prediction"]["predictions"]] == [25, 30, 35]
    # weekly demand is the mean of 25, 30, ... 55: 40, reorder point 60
    assert body["recommendation"]["action"] == "monitor"
    assert body["recommendation"]["reorder_point"] == 60


def test_item_prediction_without_history(client):
    item = _create_item(client)
    body = client.get(f"/api/dashboard/prediction/{item['id']}").get_json()

    assert body["historical_data"] == []
    assert body["prediction"]["trend"] == "insufficient_data"
    assert body["recommendation"] == {
        "action": "monitor",
        "quantity": 0,
        "reason": "Insufficient historical data",
    }


def test_item_prediction_rejects_negative_periods(client):
    item = _create_item(client)
    response = client.get(f"/api/dashboard/prediction/{item['id']}?periods=-1")

    assert response.status_code == 400


def test_prediction_for_missing_item(client):
    assert client.get("/api/dashboard/prediction/unknown").status_code == 404


def test_dashboard_stats(client):
    item = _create_item(client)
    client.post("/api/stock-in", json={"item_id": item["id"], "qty": 20,
                                       "date": date.today().isoformat()})

    body = client.get("/api/dashboard/stats").get_json()

    assert body["stats"]["total_items"] == 1
    assert body["stats"]["total_stock"] == 50
    assert len(body["trends"]) == 1
    assert body["trends"][0]["value"] == 20
    assert body["prediction"]["trend"] == "stable"
    assert len(body["prediction"]["predictions"]) == 6
    assert body["recent_movements"][0]["type"] == "in"


def test_reports(client):
    item = _create_item(client)
    client.post("/api/stock-in", json={"item_id": item["id"], "qty": 5, "date": "2024-03-01"})

    reports = client.get("/api/reports?start_date=2024-01-01&end_date=2024-12-31").get_json()["reports"]
    assert set(reports) == {"stock", "movement", "orders"}
    assert reports["movement"][0]["transaction_code"] == "TXN-IN-20240301-001"

    only_stock = client.get("/api/reports?type=stock").get_json()["reports"]
    assert set(only_stock) == {"stock"}

    assert client.get("/api/reports?type=weekly").status_code == 400
    assert client.get("/api/reports?type=movement&start_date=yesterday").status_code == 400
