import uuid

from humanlenk.database.entities.chat_session import ChatSession
from humanlenk.database.entities.messages import UserMessage


def chat_turn(client, headers, chat_session_id, message):
    response = client.post("/api/chat", json={"message": message, "chatSessionId": chat_session_id}, headers=headers)
    assert response.status_code == 200, response.text
    return response.json()["data"]


def test_session_title_is_kept(register, new_session):
    account = register()

    assert new_session(account["headers"], title="Trip planning")["title"] == "Trip planning"


def test_sessions_are_private(client, register, new_session):
    alice = register()
    bob = register(email="bob@example.com", name="Bob")
    new_session(alice["headers"], title="Mine")

    assert client.get("/api/chat/sessions", headers=bob["headers"]).json()["data"] == []


def test_delete_session_cascades_to_messages(client, register, new_session, count_rows):
    account = register()
    chat_session = new_session(account["headers"])
    chat_turn(client, account["headers"], chat_session["id"], "hello")

    response = client.delete(f"/api/chat/sessions/{chat_session['id']}", headers=account["headers"])

    assert response.status_code == 200
    assert count_rows(ChatSession) == 0
    assert count_rows(UserMessage) == 0


def test_delete_foreign_or_missing_session_is_not_found(client, register, new_session, count_rows):
    alice = register()
    bob = register(email="bob@example.com", name="Bob")
    bobs_session = new_session(bob["headers"])

    foreign = client.delete(f"/api/chat/sessions/{bobs_session['id']}", headers=alice["headers"])
    missing = client.delete(f"/api/chat/sessions/{uuid.uuid4()}", headers=alice["headers"])

    assert foreign.status_code == 404
    assert foreign.json()["error"] == "Chat session not found"
    assert missing.status_code == 404
    assert count_rows(ChatSession) == 1


def test_messages_page_is_latest_slice_in_chronological_order(client, register, new_session):
    account = register()
    chat_session = new_session(account["headers"])
    for index in range(3):
        chat_turn(client, account["headers"], chat_session["id"], f"turn {index}")

    response = client.get(
        "/api/chat/messages",
        params={"chatSessionId": chat_session["id"], "limit": 4},
        headers=account["headers"],
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert [message["content"] for message in data["messages"] if message["role"] == "user"] == ["turn 1", "turn 2"]
    assert [message["role"] for message in data["messages"]] == ["user", "assistant", "user", "assistant"]
    assert data["pagination"] == {"total": 6, "limit": 4, "offset": 0, "hasMore": True}
    assert data["messages"][0]["file"] is None

    older = client.get(
        "/api/chat/messages",
        params={"chatSessionId": chat_session["id"], "limit": 4, "offset": 4},
        headers=account["headers"],
    ).json()["data"]
    assert [message["content"] for message in older["messages"]][0] == "turn 0"
    assert older["pagination"]["hasMore"] is False


def test_messages_of_foreign_session_are_not_found(client, register, new_session):
    alice = register()
    bob = register(email="bob@example.com", name="Bob")
    bobs_session = new_session(bob["headers"])

    response = client.get("/api/chat/messages", params={"chatSessionId": bobs_session["id"]}, headers=alice["headers"])

    assert response.status_code == 404


def test_messages_query_requires_session_id(client, register):
    account = register()

    response = client.get("/api/chat/messages", headers=account["headers"])

    assert response.status_code == 400
    assert response.json()["details"][0]["field"] == "chatSessionId"


def test_delete_single_message(client, register, new_session, count_rows):
    alice = register()
    bob = register(email="bob@example.com", name="Bob")
    chat_session = new_session(alice["headers"])
    turn = chat_turn(client, alice["headers"], chat_session["id"], "hello")
    message_id = turn["userMessage"]["id"]

    assert client.delete(f"/api/chat/messages/{message_id}", headers=bob["headers"]).status_code == 404
    assert client.delete(f"/api/chat/messages/{uuid.uuid4()}", headers=alice["headers"]).status_code == 404
    assert count_rows(UserMessage) == 2

    response = client.delete(f"/api/chat/messages/{message_id}", headers=alice["headers"])

    assert response.status_code == 200
    assert count_rows(UserMessage) == 1


def test_clear_all_messages(client, register, new_session, count_rows):
    alice = register()
    bob = register(email="bob@example.com", name="Bob")

    empty = client.delete("/api/chat/messages", headers=alice["headers"])
    assert empty.status_code == 200
    assert empty.json()["data"] == {"deletedCount": 0}

    chat_turn(client, alice["headers"], new_session(alice["headers"])["id"], "one")
    chat_turn(client, alice["headers"], new_session(alice["headers"])["id"], "two")
    chat_turn(client, bob["headers"], new_session(bob["headers"])["id"], "bob's")

    response = client.delete("/api/chat/messages", headers=alice["headers"])

    assert response.json()["data"] == {"deletedCount": 4}
    assert response.json()["message"] == "Deleted 4 messages"
    assert count_rows(UserMessage) == 2
    assert count_rows(ChatSession) == 3


def test_chat_stats(client, register, new_session):
    account = register()

    before = client.get("/api/chat/stats", headers=account["headers"]).json()["data"]
    assert before == {"totalMessages": 0, "messagesByRole": {}, "firstMessageDate": None}

    chat_session = new_session(account["headers"])
    first = chat_turn(client, account["headers"], chat_session["id"], "hello")
    chat_turn(client, account["headers"], chat_session["id"], "again")

    stats = client.get("/api/chat/stats", headers=account["headers"]).json()["data"]
    assert stats["totalMessages"] == 4
    assert stats["messagesByRole"] == {"user": 2, "assistant": 2}
    assert stats["firstMessageDate"] == first["userMessage"]["createdAt"]
