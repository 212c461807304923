"""Integration tests for API endpoints"""

import pytest
from datetime import datetime, timezone
from fastapi.testclient import TestClient
from vcoin.api.main import create_app

STUDENT_PASSWORD = "Secreto-123!"  # matches the seeded student


def _login(client: TestClient, class_id, registro, password=STUDENT_PASSWORD):
    return client.post(
        "/v1/auth/student/login",
        json={"class_id": str(class_id), "registro": str(registro), "password": password},
    )


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["login_throttle"]["tracked"] == 0
    assert data["login_throttle"]["oldest_age_ms"] is None


def test_lifespan_runs_throttle_sweep(throttle):
    """Startup starts the periodic sweep and shutdown stops it"""
    assert not throttle.is_running

    with TestClient(create_app(login_throttle=throttle)) as client:
        assert throttle.is_running
        assert client.get("/health").status_code == 200

    assert not throttle.is_running


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus metrics endpoint"""
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "vcoin_student_login_total" in response.text


def test_request_id_header(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "abc-123"})
    assert response.headers["X-Request-ID"] == "abc-123"
    assert client.get("/health").headers["X-Request-ID"]


def test_login_success(client: TestClient, seeded):
    response = _login(client, seeded.class_id, seeded.registro)

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["student"] == {
        "student_id": seeded.student_id,
        "name": "Lucía Fernández",
        "class_name": "5to A",
    }


def test_login_wrong_password_is_throttled(client: TestClient, seeded, throttle, sleeper):
    """Failed logins wait an exponential delay before answering 401"""
    first = _login(client, seeded.class_id, seeded.registro, password="incorrecta")
    second = _login(client, seeded.class_id, seeded.registro, password="incorrecta")

    assert first.status_code == 401
    assert second.status_code == 401
    assert "Credenciales inválidas" in first.json()["detail"]
    assert sleeper.calls == [1.0, 2.0]
    assert throttle.get_current_delay(f"{seeded.class_id}:{seeded.registro}") == 2000


def test_login_success_clears_throttle(client: TestClient, seeded, throttle):
    identifier = f"{seeded.class_id}:{seeded.registro}"
    _login(client, seeded.class_id, seeded.registro, password="incorrecta")
    assert throttle.get_current_delay(identifier) == 1000

    assert _login(client, seeded.class_id, seeded.registro).status_code == 200
    assert throttle.get_current_delay(identifier) == 0


def test_login_identifier_is_normalised(client: TestClient, seeded, throttle):
    """Leading zeros map to the same throttle identifier"""
    _login(client, f"00{seeded.class_id}", f"0{seeded.registro}", password="incorrecta")
    assert throttle.get_current_delay(f"{seeded.class_id}:{seeded.registro}") == 1000


def test_login_unknown_student_is_throttled(client: TestClient, seeded, sleeper):
    response = _login(client, seeded.class_id, 999)
    assert response.status_code == 401
    assert sleeper.calls == [1.0]


def test_login_student_without_password(client: TestClient, seeded):
    assert _login(client, seeded.class_id, 7, password="cualquiera").status_code == 401


@pytest.mark.parametrize(
    "class_id, registro, password",
    [
        ("1.5", "42", "secreto"),
        ("-1", "42", "secreto"),
        ("0", "42", "secreto"),
        ("9223372036854775808", "42", "secreto"),
        ("1", "99999999999999999999999", "secreto"),
        ("1", "abc", "secreto"),
        ("1", "42", "con espacio"),
        ("1", "42", "comilla'"),
        ("1", "42", ""),
    ],
)
def test_login_rejects_invalid_input(client: TestClient, seeded, sleeper, class_id, registro, password):
    response = client.post(
        "/v1/auth/student/login",
        json={"class_id": class_id, "registro": registro, "password": password},
    )
    assert response.status_code == 422
    assert sleeper.calls == []


def test_student_summary(client: TestClient, seeded):
    response = client.get(f"/v1/students/{seeded.student_id}/summary")

    assert response.status_code == 200
    data = response.json()
    assert data["class_name"] == "5to A"
    assert data["monthly_interest_rate"] == 0.03  # latest rate wins
    assert data["total_invested"] == 1500.0
    assert data["current_amount"] > 1500.0
    assert data["gain_percentage"] > 0
    assert data["projected_final_amount"] > data["current_amount"]
    assert data["has_ended"] is False
    assert 59 <= data["days_remaining"] <= 61
    assert data["class_progress_percent"] == pytest.approx(50.0, abs=2)
    assert data["display"]["total_invested"] == "$ 1.500,00"
    assert data["display"]["monthly_interest_rate"] == "3,00%"
    assert data["display"]["gain_percentage"].startswith("+")

    first = data["investments"][0]
    assert first["monto"] == 1000.0
    assert first["current_value"] == pytest.approx(1030.0, rel=1e-3)
    assert first["days_held"] == 30


def test_student_summary_without_investments(client: TestClient, seeded):
    response = client.get(f"/v1/students/{seeded.other_student_id}/summary")

    assert response.status_code == 200
    data = response.json()
    assert data["total_invested"] == 0
    assert data["current_amount"] == 0
    assert data["gain_percentage"] == 0
    assert data["investments"] == []


def test_student_summary_not_found(client: TestClient, seeded):
    response = client.get("/v1/students/9999/summary")
    assert response.status_code == 404


def test_current_amount(client: TestClient, seeded):
    response = client.get(f"/v1/students/{seeded.student_id}/current-amount")

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["monto_actual"] > 1500.0
    assert data["timestamp"] > 0


def test_create_investment_unlocks_achievement(client: TestClient, seeded):
    """The first automatic achievement a student qualifies for unlocks once"""
    payload = {
        "student_id": seeded.other_student_id,
        "fecha": datetime.now(timezone.utc).isoformat(),
        "monto": 250.0,
        "concepto": "Primer ahorro",
    }

    first = client.post("/v1/investments", json=payload)
    second = client.post("/v1/investments", json=payload)

    assert first.status_code == 201
    data = first.json()
    assert data["investment"]["monto"] == 250.0
    assert data["investment"]["student_id"] == seeded.other_student_id
    assert [a["name"] for a in data["unlocked_achievements"]] == ["Primera inversión"]

    assert second.status_code == 201
    assert second.json()["unlocked_achievements"] == []


def test_create_investment_reaching_total(client: TestClient, seeded):
    response = client.post(
        "/v1/investments",
        json={
            "student_id": seeded.student_id,
            "fecha": "2026-10-01T10:00:00Z",
            "monto": 4000.0,
            "concepto": "Venta de rifas",
        },
    )

    assert response.status_code == 201
    names = {a["name"] for a in response.json()["unlocked_achievements"]}
    assert names == {"Primera inversión", "Gran ahorrista"}

    summary = client.get(f"/v1/students/{seeded.student_id}/summary").json()
    assert summary["total_invested"] == 5500.0


def test_create_investment_unknown_student(client: TestClient, seeded):
    response = client.post(
        "/v1/investments",
        json={"student_id": 9999, "fecha": "2026-10-01T10:00:00Z", "monto": 10.0, "concepto": "x"},
    )
    assert response.status_code == 404


@pytest.mark.parametrize("monto", [0, -50])
def test_create_investment_rejects_non_positive_amount(client: TestClient, seeded, monto):
    response = client.post(
        "/v1/investments",
        json={"student_id": seeded.student_id, "fecha": "2026-10-01T10:00:00Z", "monto": monto, "concepto": "x"},
    )
    assert response.status_code == 422
