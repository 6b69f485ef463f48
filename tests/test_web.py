import pytest

from amort_calc_web.app import app


@pytest.fixture
def client():
    app.config.update(
        TESTING=True,
        TR_HISTORY_PATH=None,
        SCHEDULE_MAX_ROWS=0,
        MAX_TERM_MONTHS=600,
        MAX_SAFETY_MARGIN=240,
    )
    with app.test_client() as client:
        yield client


PAYLOAD = {"principal": "100000", "rate": "1", "term": 12, "system": "price"}


class TestScheduleEndpoint:
    def test_health(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.get_json()["status"] == "ok"

    def test_price_schedule(self, client):
        response = client.post("/api/schedule", json=PAYLOAD)
        assert response.status_code == 200
        data = response.get_json()
        assert data["summary"]["months_executed"] == 12
        assert data["schedule"][0]["installment"] == 8884.88
        assert data["schedule"][0]["label"] == "-"

    def test_extras_list(self, client):
        payload = dict(PAYLOAD, start_date="2024-01-10", extras=["2024-03-01:20000"])
        data = client.post("/api/schedule", json=payload).get_json()
        assert data["schedule"][2]["extra"] == 20000.0
        assert data["schedule"][2]["label"] == "2024-03"
        assert data["summary"]["months_executed"] == 10

    def test_tr_enabled_uses_configured_history(self, client, tr_history_file):
        app.config["TR_HISTORY_PATH"] = str(tr_history_file)
        payload = dict(PAYLOAD, start_date="2024-01-10", tr_enabled=True)
        data = client.post("/api/schedule", json=payload).get_json()
        assert data["schedule"][0]["correction"] == pytest.approx(0.000605)
        assert data["schedule"][1]["correction"] == pytest.approx(0.0008)
        assert data["schedule"][-1]["balance"] == 0.0

    def test_truncates_rows(self, client):
        app.config["SCHEDULE_MAX_ROWS"] = 5
        data = client.post("/api/schedule", json=PAYLOAD).get_json()
        assert len(data["schedule"]) == 5
        assert data["summary"]["truncated"] == 7

    def test_invalid_parameters(self, client):
        response = client.post("/api/schedule", json=dict(PAYLOAD, term=0))
        assert response.status_code == 400
        assert "Term" in response.get_json()["error"]

    def test_unknown_system(self, client):
        response = client.post("/api/schedule", json=dict(PAYLOAD, system="german"))
        assert response.status_code == 400

    def test_non_json_body(self, client):
        response = client.post("/api/schedule", data="principal=1")
        assert response.status_code == 400

    def test_annual_rate_below_minus_100_percent(self, client):
        response = client.post("/api/schedule", json=dict(PAYLOAD, rate="-150", rate_type="annual"))
        assert response.status_code == 400
        assert "Annual rate" in response.get_json()["error"]


class TestRequestLimits:
    def test_term_above_limit(self, client):
        response = client.post("/api/schedule", json=dict(PAYLOAD, term=10000))
        assert response.status_code == 400
        assert "term cannot exceed 600" in response.get_json()["error"]

    def test_safety_margin_above_limit(self, client):
        response = client.post("/api/schedule", json=dict(PAYLOAD, safety_margin=100000))
        assert response.status_code == 400
        assert "safety_margin" in response.get_json()["error"]

    def test_limit_follows_config(self, client):
        app.config["MAX_TERM_MONTHS"] = 6
        assert client.post("/api/schedule", json=dict(PAYLOAD, term=6)).status_code == 200
        assert client.post("/api/schedule", json=dict(PAYLOAD, term=7)).status_code == 400
