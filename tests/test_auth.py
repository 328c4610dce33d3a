def test_register_returns_user_and_token(client):
    response = client.post(
        "/api/auth/register",
        json={"email": "alice@example.com", "password": "password123", "name": "Alice"},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    user = body["data"]["user"]
    assert user["email"] == "alice@example.com"
    assert user["name"] == "Alice"
    assert user["role"] == "user"
    assert "password" not in user
    assert body["data"]["token"]


def test_register_duplicate_email_conflicts(client, register):
    register()

    response = client.post(
        "/api/auth/register",
        json={"email": "alice@example.com", "password": "password123", "name": "Alice Again"},
    )

    assert response.status_code == 409
    assert response.json() == {"success": False, "error": "User already exists with this email"}


def test_register_validation_errors_list_fields(client):
    response = client.post(
        "/api/auth/register",
        json={"email": "not-an-email", "password": "short", "name": "A"},
    )

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "Validation failed"
    fields = {detail["field"] for detail in body["details"]}
    assert {"email", "password", "name"} <= fields


def test_login_success_and_failures(client, register):
    register()

    ok = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "password123"})
    assert ok.status_code == 200
    assert ok.json()["data"]["user"]["email"] == "alice@example.com"
    assert ok.json()["data"]["token"]

    wrong_password = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "nope-nope"})
    assert wrong_password.status_code == 401
    assert wrong_password.json()["error"] == "Invalid email or password"

    unknown = client.post("/api/auth/login", json={"email": "bob@example.com", "password": "password123"})
    assert unknown.status_code == 401
    assert unknown.json()["error"] == "Invalid email or password"


def test_me_requires_a_valid_token(client):
    assert client.get("/api/auth/me").status_code == 401
    invalid = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-token"})
    assert invalid.status_code == 401
    assert invalid.json()["success"] is False


def test_me_returns_profile_with_counts(client, register):
    account = register()

    response = client.get("/api/auth/me", headers=account["headers"])

    assert response.status_code == 200
    profile = response.json()["data"]
    assert profile["id"] == account["user"]["id"]
    assert profile["_count"] == {"files": 0, "messages": 0, "surveys": 0}


def test_update_profile(client, register):
    account = register()
    register(email="bob@example.com", name="Bob")

    renamed = client.patch("/api/auth/me", json={"name": "Alice Liddell"}, headers=account["headers"])
    assert renamed.status_code == 200
    assert renamed.json()["data"]["name"] == "Alice Liddell"

    taken = client.patch("/api/auth/me", json={"email": "bob@example.com"}, headers=account["headers"])
    assert taken.status_code == 409
    assert taken.json()["error"] == "Email already taken"


def test_change_password(client, register):
    account = register()

    wrong = client.post(
        "/api/auth/change-password",
        json={"currentPassword": "incorrect", "newPassword": "newpassword456"},
        headers=account["headers"],
    )
    assert wrong.status_code == 401
    assert wrong.json()["error"] == "Current password is incorrect"

    changed = client.post(
        "/api/auth/change-password",
        json={"currentPassword": "password123", "newPassword": "newpassword456"},
        headers=account["headers"],
    )
    assert changed.status_code == 200

    old = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "password123"})
    new = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "newpassword456"})
    assert old.status_code == 401
    assert new.status_code == 200


def test_token_of_deleted_user_is_rejected(client, register, admin):
    account = register()

    deleted = client.delete(f"/api/admin/users/{account['user']['id']}", headers=admin["headers"])
    assert deleted.status_code == 200

    response = client.get("/api/auth/me", headers=account["headers"])
    assert response.status_code == 401
    assert response.json()["error"] == "User not found"
