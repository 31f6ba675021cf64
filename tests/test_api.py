from fastapi.testclient import TestClient

from main import app
from models import RoundPhase


def test_health():
    client = TestClient(app)
    assert client.get("/health").json() == {"status": "healthy"}


def test_state_without_running_controller_is_503():
    client = TestClient(app)
    response = client.get("/api/round/state")
    assert response.status_code == 503


def test_state_chart_and_constants():
    with TestClient(app) as client:
        state = client.get("/api/round/state")
        assert state.status_code == 200
        body = state.json()
        assert body["phase"] in {phase.value for phase in RoundPhase}
        assert len(body["completed_steps"]) == 30
        assert body["axis_bounds"]["min"] <= body["axis_bounds"]["max"]

        chart = client.get("/api/round/chart")
        assert chart.status_code == 200
        assert len(chart.json()["labels"]) == 30

        constants = client.get("/api/round/constants").json()
        assert constants["step_count"] == 30
        assert constants["max_round_duration"] == 30.0

    assert app.state.controller is None
