# test_routes.py
import uvicorn
from fastapi.testclient import TestClient

import config
import customers
import main
from errors import StoreError


def _customer(client, **fields):
  body = {"name": "Asha", "address": "1 Mill Road", "morningQuota": 2, **fields}
  res = client.post("/api/customers", json=body)
  assert res.status_code == 201, res.text
  return res.json()["data"]


def test_health(client):
  body = client.get("/health").json()
  assert body["status"] == "healthy"
  assert "timestamp" in body and "uptime" in body


def test_unknown_endpoint(client):
  res = client.get("/api/nothing-here")
  assert res.status_code == 404
  assert res.json() == {"success": False, "error": "Endpoint not found"}


def test_create_customer_uses_default_price(client):
  res = client.post("/api/customers", json={"name": "Asha", "address": "1 Mill Road"})

  body = res.json()
  assert res.status_code == 201
  assert body["success"] is True
  assert body["message"] == "Customer created successfully"
  assert "error" not in body
  assert body["data"]["pricePerLiter"] == 2.0
  assert body["data"]["isActive"] is True
  assert body["data"]["category"] == "regular"


def test_create_customer_validation(client):
  res = client.post("/api/customers", json={"address": "no name"})
  assert res.status_code == 400
  assert res.json()["success"] is False
  assert res.json()["error"].startswith("Invalid request")


def test_customer_not_found(client):
  res = client.get("/api/customers/missing")
  assert res.status_code == 404
  assert res.json() == {"success": False, "error": "Customer not found"}


def test_update_and_soft_delete(client):
  c = _customer(client, phone="555")

  res = client.put(f"/api/customers/{c['id']}", json={"pricePerLiter": 60, "phone": None})
  assert res.json()["data"]["pricePerLiter"] == 60
  assert res.json()["data"]["phone"] is None

  client.delete(f"/api/customers/{c['id']}")
  assert client.get(f"/api/customers/{c['id']}").json()["data"]["isActive"] is False
  assert client.get("/api/customers", params={"active": True}).json()["data"] == []


def test_permanent_delete_removes_history(client):
  c = _customer(client)
  client.post("/api/deliveries/autofill", json={"date": "2025-03-12", "shift": "morning"})
  assert client.get("/api/deliveries/today-total").json()["data"]["total"] == 2

  res = client.delete(f"/api/customers/{c['id']}", params={"permanent": True})

  assert res.json()["message"] == "Customer permanently deleted"
  assert client.get(f"/api/customers/{c['id']}").status_code == 404
  assert client.get("/api/deliveries/today-total").json()["data"]["total"] == 0


def test_category_routes(client):
  _customer(client, name="Shop", category="variable")
  _customer(client, name="Home")

  res = client.get("/api/customers/category/variable")
  assert [c["name"] for c in res.json()["data"]] == ["Shop"]

  assert client.get("/api/customers/category/wholesale").status_code == 400
  # an unknown category on the list endpoint is ignored
  assert len(client.get("/api/customers", params={"category": "wholesale"}).json()["data"]) == 2


def test_deliveries_require_date_and_shift(client):
  for res in [
    client.get("/api/deliveries", params={"date": "2025-03-01"}),
    client.post("/api/deliveries/autofill", json={"shift": "morning"}),
    client.post("/api/deliveries/bulk", json={"date": "2025-03-01", "deliveries": []}),
  ]:
    assert res.status_code == 400
    assert res.json()["error"] == "Date and shift are required"


def test_bad_date_rejected(client):
  res = client.get("/api/deliveries", params={"date": "2025-3-1", "shift": "morning"})
  assert res.status_code == 400


def test_delivery_flow(client):
  c = _customer(client)
  day = {"date": "2025-03-12", "shift": "morning"}

  listed = client.get("/api/deliveries", params=day).json()["data"]
  assert listed[0]["actualAmount"] == 0 and listed[0]["id"] is None

  res = client.post("/api/deliveries/autofill", json=day)
  assert res.json()["message"] == "Autofilled 1 deliveries"
  assert res.json()["data"] == {"count": 1}

  res = client.post("/api/deliveries", json={
    **day, "customerId": c["id"], "actualAmount": 1.5, "delivered": True, "notes": "short",
  })
  assert res.json()["data"]["actualAmount"] == 1.5
  assert res.json()["data"]["quota"] == 2

  assert client.get("/api/deliveries/today-total").json()["data"] == {"total": 1.5, "date": "2025-03-12"}

  res = client.post("/api/deliveries/bulk", json={**day, "deliveries": [
    {"customerId": c["id"], "actualAmount": 2, "delivered": True},
    {"customerId": "ghost", "actualAmount": 2, "delivered": True},
  ]})
  assert res.json()["data"] == {"updated": 1, "skipped": ["ghost"]}

  assert client.post("/api/deliveries/clear", json=day).json()["data"] == {"count": 1}
  history = client.get(f"/api/deliveries/customer/{c['id']}").json()["data"]
  assert [(h["actualAmount"], h["delivered"]) for h in history] == [(0, False)]


def test_stock_and_sources(client):
  res = client.post("/api/sources", json={"name": "Farm A", "type": "farm"})
  assert res.status_code == 201
  source = res.json()["data"]

  assert client.post("/api/sources", json={"name": "Farm A", "type": "farm"}).status_code == 409
  assert client.post("/api/sources", json={"name": "Farm B"}).json()["error"] == "Name and type are required"

  res = client.post("/api/stock", json={"date": "2025-03-12", "shift": "morning", "source": "nowhere", "quantity": 5})
  assert res.status_code == 400
  assert res.json()["error"] == "Invalid source. Please select a valid source."

  res = client.post("/api/stock", json={"date": "2025-03-12", "shift": "morning", "source": source["id"], "quantity": 500})
  assert res.status_code == 201
  assert res.json()["data"]["sourceName"] == "Farm A"

  assert client.get("/api/stock/sources").json()["data"] == [{"value": "Farm A", "label": "Farm A", "type": "farm"}]
  inv = client.get("/api/stock/inventory").json()["data"]
  assert inv == {"currentInventory": 500, "maxCapacity": 2000, "percentage": 25, "lowStock": False}
  assert client.get("/api/dashboard/sources").json()["data"] == [{"name": "Farm A", "value": 500}]

  row_id = client.get("/api/stock/recent").json()["data"][0]["id"]
  assert client.delete(f"/api/stock/{row_id}").json()["success"] is True
  assert client.delete(f"/api/stock/{row_id}").status_code == 404

  res = client.put(f"/api/sources/{source['id']}", json={"isActive": False})
  assert res.json()["data"]["isActive"] is False
  assert client.get("/api/stock/sources").json()["data"] == []
  assert client.delete(f"/api/sources/{source['id']}").status_code == 200
  assert client.get("/api/sources").json()["data"] == []


def test_billing_routes(client):
  c = _customer(client, pricePerLiter=50)
  for day in ["2025-03-01", "2025-03-02", "2025-03-03"]:
    client.post("/api/deliveries/autofill", json={"date": day, "shift": "morning"})

  assert client.get("/api/billing/monthly", params={"month": 3}).status_code == 400

  monthly = client.get("/api/billing/monthly", params={"month": 3, "year": 2025}).json()["data"]
  assert monthly[0]["totalLiters"] == 6 and monthly[0]["totalAmount"] == 300

  res = client.post("/api/billing/payment", json={
    "customerId": c["id"], "amount": 100, "date": "2025-03-10", "month": 3, "year": 2025,
  })
  assert res.status_code == 201

  bill = client.get(f"/api/billing/customer/{c['id']}", params={"month": 3, "year": 2025}).json()["data"]
  assert bill["paidAmount"] == 100
  assert bill["totalDue"] == 200
  assert bill["settings"]["businessName"] == "MilkyWay Dairy Services"

  inv = client.get(f"/api/billing/customer/{c['id']}/invoice", params={"month": 3, "year": 2025}).json()["data"]
  assert inv["customer"]["name"] == "Asha"
  assert len(inv["dailyBreakdown"]) == 3

  assert client.get("/api/billing/today-revenue").json()["data"] == {"revenue": 0, "date": "2025-03-12"}


def test_dashboard_routes(client):
  _customer(client)
  client.post("/api/deliveries/autofill", json={"date": "2025-03-11", "shift": "morning"})
  client.post("/api/deliveries/autofill", json={"date": "2025-03-12", "shift": "morning"})

  stats = client.get("/api/dashboard/stats").json()["data"]
  assert stats["totalMilkToday"] == 2
  assert stats["estimatedRevenueToday"] == 4
  assert stats["pendingDeliveries"] == 0
  assert len(stats["weeklyOverview"]) == 7

  comparison = client.get("/api/dashboard/comparison").json()["data"]
  assert comparison == {"today": 2, "yesterday": 2, "percentageChange": 0}

  trends = client.get("/api/dashboard/trends", params={"customerId": "all"}).json()["data"]
  assert [t["date"] for t in trends] == ["2025-03-11", "2025-03-12"]


def test_settings_routes(client):
  res = client.put("/api/settings", json={"maxCapacity": 1000, "businessName": "Green Dairy"})
  assert res.json()["data"]["maxCapacity"] == 1000
  assert client.get("/api/settings").json()["data"]["businessName"] == "Green Dairy"
  assert client.get("/api/stock/inventory").json()["data"]["maxCapacity"] == 1000

  res = client.post("/api/settings/reset")
  assert res.json()["message"] == "Settings reset to defaults"
  assert client.get("/api/settings").json()["data"]["maxCapacity"] == 2000


def test_store_failure_returns_route_message(client, monkeypatch):
  def broken(*args, **kwargs):
    raise StoreError("driver detail")

  monkeypatch.setattr(customers, "list_customers", broken)

  res = client.get("/api/customers")

  assert res.status_code == 500
  assert res.json() == {"success": False, "error": "Failed to fetch customers"}


def test_unexpected_error_message(app, monkeypatch):
  def broken(*args, **kwargs):
    raise RuntimeError("secret detail")

  monkeypatch.setattr(customers, "list_customers", broken)

  with TestClient(app, raise_server_exceptions=False) as c:
    res = c.get("/api/customers")
    assert res.status_code == 500
    assert res.json() == {"success": False, "error": "secret detail"}

    monkeypatch.setattr(config, "APP_ENV", "production")
    res = c.get("/api/customers")
    assert res.status_code == 500
    assert res.json() == {"success": False, "error": "Internal server error"}


def test_date_window_query_params(client):
  c = _customer(client)
  client.post("/api/sources", json={"name": "Farm A", "type": "farm"})
  for day in ["2025-03-01", "2025-03-05"]:
    client.post("/api/deliveries/autofill", json={"date": day, "shift": "morning"})
    client.post("/api/stock", json={"date": day, "shift": "morning", "source": "Farm A", "quantity": 10})
  window = {"startDate": "2025-03-04", "endDate": "2025-03-31"}

  history = client.get(f"/api/deliveries/customer/{c['id']}", params=window).json()["data"]
  assert [h["date"] for h in history] == ["2025-03-05"]

  rows = client.get("/api/stock", params=window).json()["data"]
  assert [r["date"] for r in rows] == ["2025-03-05"]

  trends = client.get("/api/dashboard/trends", params={**window, "customerId": c["id"]}).json()["data"]
  assert trends == [{"date": "2025-03-05", "amount": 2}]

  shares = client.get("/api/dashboard/sources", params=window).json()["data"]
  assert shares == [{"name": "Farm A", "value": 10}]


def test_serve_runs_app_with_configured_address(monkeypatch):
  calls = []
  monkeypatch.setattr(uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))

  main.serve()

  assert calls == [(main.app, {"host": config.HOST, "port": config.PORT, "log_level": config.LOG_LEVEL.lower()})]
