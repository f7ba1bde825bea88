from datetime import date
import pytest
from app import create_app

@pytest.fixture
def client(tmp_path):
    app = create_app(str(tmp_path))
    app.config["TESTING"] = True
    return app.test_client()

def _add_cow(client):
    res = client.post("/animals", json={"tagId": "T-1", "breed": "Gir"})
    assert res.status_code == 201
    return res.get_json()["animal"]

def test_animal_crud(client):
    cow = _add_cow(client)
    res = client.put(f"/animals/{cow['id']}", json={"tagId": "T-1", "status": "Sick"})
    assert res.get_json()["animal"]["status"] == "Sick"
    assert client.put("/animals/nope", json={"tagId": "x"}).status_code == 404

    assert client.post("/animals", json={}).status_code == 400
    assert client.delete(f"/animals/{cow['id']}").get_json() == {"ok": True}
    assert client.get("/animals").get_json()["animals"] == []

def test_milk_entries_and_dashboard(client):
    cow = _add_cow(client)
    today = date.today().isoformat()
    client.post("/milk", json={"animalId": cow["id"], "qty": 4, "shift": "Morning"})
    client.post("/milk", json={"animalId": cow["id"], "qty": 2.5, "shift": "Evening"})
    assert client.post("/milk", json={"animalId": cow["id"], "qty": 0}).status_code == 400

    rows = client.get(f"/milk?date={today}").get_json()["milk"]
    assert [r["shift"] for r in rows] == ["Evening", "Morning"]
    assert rows[0]["animal"] == "T-1 (Gir)"

    dash = client.get("/dashboard").get_json()["dashboard"]
    assert dash["today_milk"] == 6.5
    assert dash["total_animals"] == 1

    chart = client.get("/charts/milk?width=700&height=350&ratio=2").get_json()
    assert len(chart["series"]) == 7
    assert chart["series"][-1]["value"] == 6.5
    assert chart["commands"][0] == {"op": "resize", "width": 1400, "height": 700}
    assert client.get("/charts/milk?width=0").get_json()["commands"] == []
    assert client.get("/charts/milk?width=wide").status_code == 400

def test_report_uses_configured_rate(client):
    client.post("/expenses", json={"date": "2024-03-03", "category": "Feed", "amount": 1000})
    res = client.post("/config", json={"pricing": {"milk_rate_per_liter": 40}})
    assert res.get_json()["config"]["pricing"]["milk_rate_per_liter"] == 40

    report = client.get("/reports/2024-03").get_json()["report"]
    assert report["rate"] == 40
    assert report["net_profit"] == -1000
    assert report["expense_lines"] == [{"date": "2024-03-03", "category": "Feed", "amount": 1000.0}]
    assert client.get("/reports/2024-13").status_code == 400

def test_customers_and_reset(client):
    res = client.post("/customers", json={"name": "Asha", "rate": 60, "dailyQty": 2})
    customer = res.get_json()["customer"]
    rows = client.get("/customers").get_json()["customers"]
    assert rows[0]["monthlyEstimate"] == 3600
    assert client.post("/customers", json={"name": "NoRate"}).status_code == 400
    assert client.delete(f"/customers/{customer['id']}").status_code == 200
    assert client.delete(f"/customers/{customer['id']}").status_code == 404

    client.post("/expenses", json={"amount": 10})
    client.post("/reset")
    assert client.get("/expenses").get_json()["expenses"] == []

def test_non_finite_chart_size_is_rejected(client):
    assert client.get("/charts/milk?width=inf&height=300").status_code == 400
    assert client.get("/charts/milk?ratio=inf").status_code == 400
    assert client.get("/charts/milk?height=nan").status_code == 400

def test_non_object_json_body_is_rejected(client):
    for path in ("/animals", "/milk", "/customers", "/expenses", "/config"):
        res = client.post(path, json=[{"tagId": "x"}])
        assert res.status_code == 400
        assert res.get_json() == {"ok": False, "error": "Expected a JSON object"}
    cow = _add_cow(client)
    assert client.put(f"/animals/{cow['id']}", json=["x"]).status_code == 400

def test_invalid_config_is_not_saved(client):
    bad = [{"pricing": {"milk_rate_per_liter": "fifty"}},
           {"logging": {"level": "LOUD"}},
           {"storage": {"key_prefix": "other_"}}]
    for body in bad:
        assert client.post("/config", json=body).status_code == 400
    cfg = client.get("/config").get_json()["config"]
    assert cfg["pricing"]["milk_rate_per_liter"] == 50
    assert cfg["logging"]["level"] == "INFO"
    assert cfg["storage"]["key_prefix"] == "dms_"
    assert client.get("/reports/2024-03").status_code == 200

def test_get_single_customer(client):
    res = client.post("/customers", json={"name": "Meena", "rate": 55})
    customer_id = res.get_json()["customer"]["id"]
    body = client.get(f"/customers/{customer_id}").get_json()
    assert body["customer"]["name"] == "Meena"
    assert body["customer"]["monthlyEstimate"] == 1650
    assert client.get("/customers/nope").status_code == 404
