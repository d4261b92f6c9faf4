from fastapi.testclient import TestClient

from core.domain import to_iso, utc_now
from web.main import app

client = TestClient(app)


def body(report_id, lat, lon, category="ATM"):
    return {
        "id": report_id,
        "location": {"latitude": lat, "longitude": lon},
        "category": category,
        "observation_type": "Loose card slot",
        "timestamp": to_iso(utc_now()),
        "description": "Card reader felt loose",
    }


def test_health():
    assert client.get("/health").json() == {"status": "ok"}


def test_submit_and_confirm_via_api():
    resp = client.post("/api/reports", json=body("api-1", 34.0522, -118.2437))
    assert resp.status_code == 201
    data = resp.json()
    assert data["confirmed"] is False
    assert "confidence_score" not in data["report"]

    resp = client.post("/api/reports", json=body("api-2", 34.05221, -118.24371))
    assert resp.json()["confirmed"] is True

    evaluation = client.get("/api/evaluate", params={"lat": 34.0522, "lon": -118.2437}).json()
    assert evaluation["score"] == 5
    assert evaluation["confirm"] is True
    assert evaluation["reason"]

    report = client.get("/api/reports/api-1").json()
    assert report["status"] == "Community Supported"
    assert "last_evaluated_at" not in report


def test_rejects_bad_reports():
    resp = client.post("/api/reports", json=body("api-bad", 120.0, 0.0))
    assert resp.status_code == 422
    resp = client.post("/api/reports", json={**body("api-old", 1.0, 1.0), "timestamp": "2001-01-01T00:00:00Z"})
    assert resp.status_code == 400


def test_missing_report_and_bad_coordinates():
    assert client.get("/api/reports/does-not-exist").status_code == 404
    assert client.get("/api/evaluate", params={"lat": 95, "lon": 0}).status_code == 400


def test_hotspots_endpoint():
    client.post("/api/reports", json=body("hs-1", -33.8688, 151.2093, category="Gas pump"))
    hotspots = client.get("/api/hotspots", params={"radius_meters": 200}).json()
    assert hotspots
    assert sum(h["report_count"] for h in hotspots) == len(client.get("/api/reports").json())
    assert hotspots == sorted(hotspots, key=lambda h: h["risk_score"], reverse=True)

    stored = client.post("/api/hotspots/refresh").json()
    latest = client.get("/api/hotspots/latest").json()
    assert [h["id"] for h in latest] == [h["id"] for h in stored]


def test_evaluate_omits_reason_when_not_confirmed():
    client.post("/api/reports", json=body("api-solo", 48.8566, 2.3522))
    evaluation = client.get("/api/evaluate", params={"lat": 48.8566, "lon": 2.3522}).json()
    assert evaluation["score"] == 1
    assert evaluation["confirm"] is False
    assert "reason" not in evaluation

    empty = client.get("/api/evaluate", params={"lat": -1.0, "lon": -1.0}).json()
    assert empty["score"] == 0
    assert "reason" not in empty
