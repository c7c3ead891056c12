"""Tests for the worker data push/read endpoints."""


def test_push_then_read(client):
    resp = client.post("/worker-data", json={"data": [{"station": "ABC"}, {"station": "XYZ"}]})
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "message": "Data received successfully", "count": 2}

    assert client.get("/worker-data").json() == [{"station": "ABC"}, {"station": "XYZ"}]


def test_push_replaces_previous_batch(client):
    client.post("/worker-data", json={"data": [{"a": 1}]})
    client.post("/worker-data", json={"data": []})
    assert client.get("/worker-data").json() == []


def test_push_requires_list(client):
    assert client.post("/worker-data", json={"data": {"a": 1}}).status_code == 400
    assert client.post("/worker-data", json={}).status_code == 400


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
