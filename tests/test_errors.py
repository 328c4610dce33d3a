from fastapi.testclient import TestClient

from humanlenk.main import create_app


def failing_app(settings):
    app = create_app(settings)

    @app.get("/api/boom")
    def boom():
        raise RuntimeError("database exploded")

    return app


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["timestamp"]
    assert body["uptime"] >= 0


def test_unknown_route_uses_error_envelope(client):
    response = client.get("/api/nothing-here")

    assert response.status_code == 404
    assert response.json()["success"] is False
    assert response.json()["error"]


def test_wrong_method_keeps_its_status(client):
    response = client.put("/api/auth/login", json={})

    assert response.status_code == 405
    assert response.json()["success"] is False


def test_malformed_json_is_a_validation_failure(client):
    response = client.post(
        "/api/auth/login", content=b"{not json", headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Validation failed"


def test_unexpected_error_includes_stack_outside_production(settings):
    with TestClient(failing_app(settings), raise_server_exceptions=False) as client:
        response = client.get("/api/boom")

    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "Internal Server Error"
    assert "database exploded" in body["stack"]


def test_unexpected_error_hides_stack_in_production(settings):
    production = settings.model_copy(update={"ENVIRONMENT": "production"})

    with TestClient(failing_app(production), raise_server_exceptions=False) as client:
        response = client.get("/api/boom")

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "Internal Server Error"}
