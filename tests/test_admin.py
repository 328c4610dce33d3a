import uuid

from humanlenk.database.entities.chat_session import ChatSession
from humanlenk.database.entities.files import StoredFile
from humanlenk.database.entities.messages import UserMessage
from humanlenk.database.entities.survey import Survey
from humanlenk.database.entities.user import User


def populate(client, account, upload, new_session, message="hello"):
    """Give `account` one file, one chat turn and one survey."""
    upload(account["headers"])
    chat_session = new_session(account["headers"])
    client.post("/api/chat", json={"message": message, "chatSessionId": chat_session["id"]}, headers=account["headers"])
    client.post("/api/surveys", json={"rating": 4, "feedback": "Useful"}, headers=account["headers"])


def test_admin_routes_need_admin_role(client, register):
    account = register()

    forbidden = client.get("/api/admin/users", headers=account["headers"])
    assert forbidden.status_code == 403
    assert forbidden.json() == {"success": False, "error": "Admin access required"}

    assert client.get("/api/admin/stats").status_code == 401
    assert client.delete(f"/api/admin/users/{uuid.uuid4()}", headers=account["headers"]).status_code == 403


def test_list_users_with_filters(client, register, admin):
    register()
    register(email="bob@example.com", name="Bob Builder")

    everyone = client.get("/api/admin/users", headers=admin["headers"]).json()["data"]
    assert everyone["pagination"]["total"] == 3
    assert all("_count" in user for user in everyone["users"])
    assert all("password" not in user for user in everyone["users"])

    builders = client.get("/api/admin/users", params={"search": "BUILDER"}, headers=admin["headers"]).json()["data"]
    assert [user["email"] for user in builders["users"]] == ["bob@example.com"]

    by_email = client.get("/api/admin/users", params={"search": "alice@"}, headers=admin["headers"]).json()["data"]
    assert [user["name"] for user in by_email["users"]] == ["Alice"]

    admins = client.get("/api/admin/users", params={"role": "admin"}, headers=admin["headers"]).json()["data"]
    assert [user["email"] for user in admins["users"]] == ["admin@example.com"]


def test_user_detail(client, register, admin, upload, new_session):
    account = register()
    populate(client, account, upload, new_session)

    response = client.get(f"/api/admin/users/{account['user']['id']}", headers=admin["headers"])

    assert response.status_code == 200
    detail = response.json()["data"]
    assert detail["email"] == "alice@example.com"
    assert len(detail["files"]) == 1
    assert len(detail["messages"]) == 2
    assert [survey["rating"] for survey in detail["surveys"]] == [4]
    assert detail["_count"] == {"files": 1, "messages": 2, "surveys": 1}


def test_user_detail_not_found(client, admin):
    assert client.get(f"/api/admin/users/{uuid.uuid4()}", headers=admin["headers"]).status_code == 404
    assert client.get("/api/admin/users/nope", headers=admin["headers"]).status_code == 404


def test_admin_cannot_delete_self(client, admin, count_rows):
    response = client.delete(f"/api/admin/users/{admin['user']['id']}", headers=admin["headers"])

    assert response.status_code == 400
    assert response.json()["error"] == "Cannot delete yourself"
    assert count_rows(User) == 1


def test_delete_user_removes_everything_they_own(client, register, admin, upload, new_session, count_rows):
    alice = register()
    bob = register(email="bob@example.com", name="Bob")
    populate(client, alice, upload, new_session)
    populate(client, bob, upload, new_session)

    response = client.delete(f"/api/admin/users/{alice['user']['id']}", headers=admin["headers"])

    assert response.status_code == 200
    assert count_rows(User) == 2
    assert count_rows(ChatSession) == 1
    assert count_rows(UserMessage) == 2
    assert count_rows(StoredFile) == 1
    assert count_rows(Survey) == 1
    assert client.delete(f"/api/admin/users/{alice['user']['id']}", headers=admin["headers"]).status_code == 404


def test_change_role(client, register, admin):
    account = register()

    promoted = client.patch(
        f"/api/admin/users/{account['user']['id']}/role", json={"role": "admin"}, headers=admin["headers"]
    )
    assert promoted.status_code == 200
    assert promoted.json()["data"]["role"] == "admin"
    assert client.get("/api/admin/stats", headers=account["headers"]).status_code == 200

    invalid = client.patch(
        f"/api/admin/users/{account['user']['id']}/role", json={"role": "owner"}, headers=admin["headers"]
    )
    assert invalid.status_code == 400

    missing = client.patch(f"/api/admin/users/{uuid.uuid4()}/role", json={"role": "user"}, headers=admin["headers"])
    assert missing.status_code == 404


def test_admin_cannot_demote_self(client, admin):
    response = client.patch(f"/api/admin/users/{admin['user']['id']}/role", json={"role": "user"}, headers=admin["headers"])

    assert response.status_code == 400
    assert response.json()["error"] == "Cannot demote yourself"
    assert client.get("/api/admin/stats", headers=admin["headers"]).status_code == 200


def test_dashboard_stats(client, register, admin, upload, new_session):
    account = register()
    populate(client, account, upload, new_session)

    stats = client.get("/api/admin/stats", headers=admin["headers"]).json()["data"]

    assert stats["overview"] == {"totalUsers": 2, "totalFiles": 1, "totalMessages": 2, "activeUsers": 2}
    assert stats["usersByRole"] == {"user": 1, "admin": 1}
    assert stats["filesByStatus"] == {"completed": {"count": 1, "totalSize": len(b"meeting notes")}}
    assert stats["messagesByRole"] == {"user": 1, "assistant": 1}
    assert len(stats["recent"]["users"]) == 2
    assert stats["recent"]["files"][0]["user"]["email"] == "alice@example.com"


def test_survey_listing(client, register, admin):
    alice = register()
    bob = register(email="bob@example.com", name="Bob")
    client.post("/api/surveys", json={"rating": 5, "feedback": "Great"}, headers=alice["headers"])
    client.post("/api/surveys", json={"rating": 2, "feedback": "Slow"}, headers=bob["headers"])

    data = client.get("/api/admin/surveys", headers=admin["headers"]).json()["data"]

    assert data["pagination"]["total"] == 2
    assert data["averageRating"] == 3.5
    assert {survey["user"]["email"] for survey in data["surveys"]} == {"alice@example.com", "bob@example.com"}


def test_all_files_listing_includes_owner(client, register, admin, upload):
    alice = register()
    bob = register(email="bob@example.com", name="Bob")
    upload(alice["headers"], name="a.txt")
    upload(bob["headers"], name="b.txt")

    everything = client.get("/api/admin/files", headers=admin["headers"]).json()["data"]
    assert everything["pagination"]["total"] == 2
    assert {file["user"]["email"] for file in everything["files"]} == {"alice@example.com", "bob@example.com"}

    bobs = client.get("/api/admin/files", params={"userId": bob["user"]["id"]}, headers=admin["headers"]).json()["data"]
    assert [file["name"] for file in bobs["files"]] == ["b.txt"]


def test_admin_deletes_any_file(client, register, admin, upload, storage, count_rows):
    account = register()
    file = upload(account["headers"]).json()["data"]

    response = client.delete(f"/api/admin/files/{file['id']}", headers=admin["headers"])

    assert response.status_code == 200
    assert storage.deleted == [file["s3Key"]]
    assert count_rows(StoredFile) == 0
    assert client.delete(f"/api/admin/files/{file['id']}", headers=admin["headers"]).status_code == 404
