import uuid

from starlette.datastructures import UploadFile

from humanlenk.api.dependencies import get_app_settings, get_storage_client
from humanlenk.database.entities.files import StoredFile
from humanlenk.database.entities.messages import UserMessage

DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def test_upload_stores_object_and_record(register, upload, storage):
    account = register()

    response = upload(account["headers"], name="notes.txt", content=b"meeting notes")

    assert response.status_code == 201
    file = response.json()["data"]
    assert file["name"] == "notes.txt"
    assert file["type"] == "text/plain"
    assert file["size"] == len(b"meeting notes")
    assert file["status"] == "completed"
    assert file["s3Key"].startswith(f"{account['user']['id']}/")
    assert file["s3Key"].endswith(".txt")
    stored = storage.objects[file["s3Key"]]
    assert stored["bucket"] == "humanlenk-test"
    assert stored["body"] == b"meeting notes"
    assert stored["extra"]["ServerSideEncryption"] == "AES256"
    assert stored["extra"]["ContentType"] == "text/plain"
    assert stored["extra"]["Metadata"]["userId"] == account["user"]["id"]
    assert file["url"].endswith(file["s3Key"])


def test_upload_rejects_disallowed_type(register, upload, storage, count_rows):
    account = register()

    response = upload(account["headers"], name="photo.png", content=b"\x89PNG", content_type="image/png")

    assert response.status_code == 400
    assert response.json()["error"].startswith("Invalid file type")
    assert storage.objects == {}
    assert count_rows(StoredFile) == 0


def test_upload_rejects_oversized_file(app, settings, register, upload, count_rows):
    account = register()
    app.dependency_overrides[get_app_settings] = lambda: settings.model_copy(update={"MAX_UPLOAD_BYTES": 8})

    response = upload(account["headers"], content=b"more than eight bytes")

    assert response.status_code == 400
    assert response.json()["error"].startswith("File too large")
    assert count_rows(StoredFile) == 0


def test_upload_size_limit_boundary(app, settings, register, upload, storage, count_rows):
    account = register()
    app.dependency_overrides[get_app_settings] = lambda: settings.model_copy(update={"MAX_UPLOAD_BYTES": 8})

    at_limit = upload(account["headers"], name="eight.txt", content=b"12345678")
    one_over = upload(account["headers"], name="nine.txt", content=b"123456789")

    assert at_limit.status_code == 201
    assert at_limit.json()["data"]["size"] == 8
    assert one_over.status_code == 400
    assert count_rows(StoredFile) == 1
    assert len(storage.objects) == 1


def test_upload_reads_no_more_than_limit_plus_one(app, settings, register, upload, monkeypatch):
    account = register()
    app.dependency_overrides[get_app_settings] = lambda: settings.model_copy(update={"MAX_UPLOAD_BYTES": 8})
    requested = []
    original_read = UploadFile.read

    async def recording_read(self, size=-1):
        requested.append(size)
        return await original_read(self, size)

    monkeypatch.setattr(UploadFile, "read", recording_read)

    response = upload(account["headers"], content=b"x" * 4096)

    assert response.status_code == 400
    assert requested == [9]


def test_upload_without_storage_is_unavailable(app, register, upload, count_rows):
    account = register()
    app.dependency_overrides[get_storage_client] = lambda: None

    response = upload(account["headers"])

    assert response.status_code == 503
    assert response.json()["error"] == "File upload service unavailable"
    assert count_rows(StoredFile) == 0


def test_upload_storage_failure_is_unavailable(register, upload, storage, count_rows):
    account = register()
    storage.fail = True

    response = upload(account["headers"])

    assert response.status_code == 503
    assert count_rows(StoredFile) == 0


def test_list_files_with_filters(client, register, upload):
    alice = register()
    bob = register(email="bob@example.com", name="Bob")
    upload(alice["headers"], name="a.txt")
    upload(alice["headers"], name="b.docx", content=b"docx bytes", content_type=DOCX)
    upload(bob["headers"], name="c.txt")

    everything = client.get("/api/files", headers=alice["headers"]).json()["data"]
    assert everything["pagination"]["total"] == 2
    assert {file["name"] for file in everything["files"]} == {"a.txt", "b.docx"}
    assert all(file["_count"] == {"messages": 0} for file in everything["files"])

    word = client.get("/api/files", params={"type": "wordprocessingml"}, headers=alice["headers"]).json()["data"]
    assert [file["name"] for file in word["files"]] == ["b.docx"]

    processing = client.get("/api/files", params={"status": "processing"}, headers=alice["headers"]).json()["data"]
    assert processing["files"] == []

    paged = client.get("/api/files", params={"limit": 1}, headers=alice["headers"]).json()["data"]
    assert len(paged["files"]) == 1
    assert paged["pagination"]["hasMore"] is True


def test_list_files_rejects_unknown_status(client, register):
    account = register()

    response = client.get("/api/files", params={"status": "archived"}, headers=account["headers"])

    assert response.status_code == 400


def test_file_stats(client, register, upload):
    account = register()
    upload(account["headers"], name="a.txt", content=b"12345")
    upload(account["headers"], name="b.txt", content=b"123")
    upload(account["headers"], name="c.docx", content=b"1234567", content_type=DOCX)

    stats = client.get("/api/files/stats", headers=account["headers"]).json()["data"]

    assert stats["totalFiles"] == 3
    assert stats["totalSize"] == 15
    assert stats["byStatus"] == {"completed": {"count": 3, "size": 15}}
    assert stats["byType"]["text/plain"] == {"count": 2, "size": 8}
    assert stats["byType"][DOCX] == {"count": 1, "size": 7}


def test_file_detail_is_scoped_to_owner(client, register, upload):
    alice = register()
    bob = register(email="bob@example.com", name="Bob")
    file = upload(alice["headers"]).json()["data"]

    own = client.get(f"/api/files/{file['id']}", headers=alice["headers"])
    assert own.status_code == 200
    assert own.json()["data"]["_count"] == {"messages": 0}
    assert "user" not in own.json()["data"]

    assert client.get(f"/api/files/{file['id']}", headers=bob["headers"]).status_code == 404
    assert client.get(f"/api/files/{uuid.uuid4()}", headers=alice["headers"]).status_code == 404
    assert client.get("/api/files/not-a-uuid", headers=alice["headers"]).status_code == 404


def test_download_link(client, register, upload):
    account = register()
    file = upload(account["headers"], name="report.txt").json()["data"]

    response = client.get(f"/api/files/{file['id']}/download", headers=account["headers"])

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["expiresIn"] == 3600
    assert file["s3Key"] in data["downloadUrl"]
    assert "X-Amz-Expires=3600" in data["downloadUrl"]


def test_download_of_foreign_file_is_not_found(client, register, upload):
    alice = register()
    bob = register(email="bob@example.com", name="Bob")
    file = upload(alice["headers"]).json()["data"]

    assert client.get(f"/api/files/{file['id']}/download", headers=bob["headers"]).status_code == 404


def test_delete_file_keeps_messages_that_referenced_it(client, app, register, upload, new_session, storage, count_rows):
    account = register()
    file = upload(account["headers"]).json()["data"]
    chat_session = new_session(account["headers"])
    client.post(
        "/api/chat",
        json={"message": "what is in it?", "chatSessionId": chat_session["id"], "fileId": file["id"]},
        headers=account["headers"],
    )
    detail = client.get(f"/api/files/{file['id']}", headers=account["headers"]).json()["data"]
    assert detail["_count"] == {"messages": 2}

    response = client.delete(f"/api/files/{file['id']}", headers=account["headers"])

    assert response.status_code == 200
    assert storage.deleted == [file["s3Key"]]
    assert count_rows(StoredFile) == 0
    assert count_rows(UserMessage) == 2
    with app.state.session_factory() as session:
        assert all(message.file_id is None for message in session.query(UserMessage).all())


def test_delete_foreign_file_is_not_found(client, register, upload, storage, count_rows):
    alice = register()
    bob = register(email="bob@example.com", name="Bob")
    file = upload(alice["headers"]).json()["data"]

    response = client.delete(f"/api/files/{file['id']}", headers=bob["headers"])

    assert response.status_code == 404
    assert storage.deleted == []
    assert count_rows(StoredFile) == 1
